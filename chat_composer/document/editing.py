"""Offset arithmetic over inline content.

Inline content is addressed by character offsets: a text run spans
``len(text)`` units and every entity spans exactly one.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from chat_composer.document.nodes import Mark, Text


# Stand-in for entities when inline content is flattened to a string
OBJECT_REPLACEMENT = '\ufffc'


class InvalidPositionError(ValueError):
    """Raised when a position does not address the document."""


@dataclass(frozen=True, order=True)
class Position:
    """A caret position.

    Attributes:
        block: Index into ``Document.textblocks()``.
        offset: Offset inside that text block.
    """

    block: int
    offset: int


def node_length(node) -> int:
    """Number of offset units occupied by ``node``."""
    if isinstance(node, Text):
        return len(node.text)
    return 1


def content_length(content: Iterable) -> int:
    """Total offset units of inline content."""
    return sum(node_length(node) for node in content)


def content_text(content: Iterable) -> str:
    """Flatten inline content, one OBJECT_REPLACEMENT per entity."""
    return ''.join(node.text if isinstance(node, Text) else OBJECT_REPLACEMENT for node in content)


def split_content(content: Sequence, offset: int) -> tuple[list, list]:
    """Split inline content at ``offset``, cutting a text run if needed.

    Raises:
        InvalidPositionError: If offset is outside the content.
    """
    if offset < 0 or offset > content_length(content):
        raise InvalidPositionError(f'Offset {offset} outside content of length {content_length(content)}')

    left: list = []
    right: list = []
    remaining = offset
    for node in content:
        size = node_length(node)
        if remaining >= size:
            left.append(node)
            remaining -= size
        elif remaining == 0:
            right.append(node)
        else:
            left.append(node.model_copy(update={'text': node.text[:remaining]}))
            right.append(node.model_copy(update={'text': node.text[remaining:]}))
            remaining = 0
    return left, right


def style_before(content: Sequence, offset: int) -> frozenset[Mark]:
    """Marks a character typed at ``offset`` inherits.

    Links are not inclusive: typing at the edge of a link does not extend it.
    """
    left, _ = split_content(content, offset)
    if not left or not isinstance(left[-1], Text):
        return frozenset()
    return left[-1].marks - {Mark.LINK}


def merge_runs(content: Iterable) -> list:
    """Drop empty text runs and merge neighbouring runs of equal style."""
    merged: list = []
    for node in content:
        if isinstance(node, Text):
            if not node.text:
                continue
            previous = merged[-1] if merged else None
            if isinstance(previous, Text) and previous.style == node.style:
                merged[-1] = previous.model_copy(update={'text': previous.text + node.text})
                continue
        merged.append(node)
    return merged
