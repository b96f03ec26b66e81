"""Markup text: the wire and storage format of a message."""

from chat_composer.markup.parser import parse, parse_inline
from chat_composer.markup.serializer import serialize, serialize_inline


__all__ = [
    'parse',
    'parse_inline',
    'serialize',
    'serialize_inline',
]
