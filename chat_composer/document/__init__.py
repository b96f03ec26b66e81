"""Editable document model for one chat message."""

from chat_composer.document.editing import OBJECT_REPLACEMENT, InvalidPositionError, Position
from chat_composer.document.models import (
    Block,
    Blockquote,
    BulletList,
    CodeBlock,
    Document,
    OrderedList,
    Paragraph,
)
from chat_composer.document.nodes import (
    ChannelMention,
    Emoji,
    Inline,
    Mark,
    SpecialMention,
    SpecialMentionKind,
    Text,
    UserMention,
    is_entity,
)


__all__ = [
    'OBJECT_REPLACEMENT',
    'Block',
    'Blockquote',
    'BulletList',
    'ChannelMention',
    'CodeBlock',
    'Document',
    'Emoji',
    'Inline',
    'InvalidPositionError',
    'Mark',
    'OrderedList',
    'Paragraph',
    'Position',
    'SpecialMention',
    'SpecialMentionKind',
    'Text',
    'UserMention',
    'is_entity',
]
