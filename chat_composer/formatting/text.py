"""Plain-text rendering and entity collection for markup messages."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from chat_composer.document import (
    Blockquote,
    BulletList,
    ChannelMention,
    CodeBlock,
    Document,
    Emoji,
    OrderedList,
    Paragraph,
    SpecialMention,
    SpecialMentionKind,
    Text,
    UserMention,
)
from chat_composer.markup import parse


@dataclass
class CollectedEntities:
    """Entities referenced by a message, in first-seen order without duplicates."""

    user_ids: list[str] = field(default_factory=list)
    channel_ids: list[str] = field(default_factory=list)
    special_mentions: list[SpecialMentionKind] = field(default_factory=list)

    def add(self, node) -> None:
        """Record one entity node; emoji are not tracked."""
        if isinstance(node, UserMention):
            _append_unique(self.user_ids, node.user_id)
        elif isinstance(node, ChannelMention):
            _append_unique(self.channel_ids, node.channel_id)
        elif isinstance(node, SpecialMention):
            _append_unique(self.special_mentions, node.kind)

    def merge(self, other: 'CollectedEntities') -> None:
        """Merge another collection into this one."""
        for user_id in other.user_ids:
            _append_unique(self.user_ids, user_id)
        for channel_id in other.channel_ids:
            _append_unique(self.channel_ids, channel_id)
        for kind in other.special_mentions:
            _append_unique(self.special_mentions, kind)

    def __bool__(self) -> bool:
        """True if the message notifies anyone or references a channel."""
        return bool(self.user_ids or self.channel_ids or self.special_mentions)


def _append_unique(items: list, value) -> None:
    if value not in items:
        items.append(value)


def collect_entities(markup: str | None) -> CollectedEntities:
    """Extract the users, channels and group mentions a message references.

    Args:
        markup: Message markup text.

    Returns:
        CollectedEntities for notification fan-out or name resolution.
    """
    entities = CollectedEntities()
    if not markup:
        return entities

    for node in parse(markup).entities():
        entities.add(node)
    return entities


def _render_node(node, users: dict[str, str], channels: dict[str, str]) -> str:
    if isinstance(node, Text):
        return node.text
    if isinstance(node, UserMention):
        return f'@{users.get(node.user_id) or node.display_name or node.user_id}'
    if isinstance(node, ChannelMention):
        return f'#{channels.get(node.channel_id) or node.name or node.channel_id}'
    if isinstance(node, SpecialMention):
        return f'@{node.kind.value}'
    if isinstance(node, Emoji):
        return node.unicode or f':{node.shortcode}:'
    return ''


def _render_inline(content: Iterable, users: dict[str, str], channels: dict[str, str]) -> str:
    return ''.join(_render_node(node, users, channels) for node in content)


def render_document(document: Document, users: dict[str, str], channels: dict[str, str]) -> str:
    """Render a document as human-readable text.

    Links show their label, marks are dropped, lists and quotes keep a
    simple textual prefix.
    """
    lines: list[str] = []
    for block in document.blocks:
        if isinstance(block, Paragraph):
            lines.append(_render_inline(block.content, users, channels))
        elif isinstance(block, BulletList):
            lines.extend(f'• {_render_inline(item.content, users, channels)}' for item in block.items)
        elif isinstance(block, OrderedList):
            lines.extend(
                f'{block.start + i}. {_render_inline(item.content, users, channels)}'
                for i, item in enumerate(block.items)
            )
        elif isinstance(block, Blockquote):
            lines.extend(f'> {_render_inline(line.content, users, channels)}' for line in block.lines)
        elif isinstance(block, CodeBlock):
            lines.append(block.code)
    return '\n'.join(lines)


def format_text(markup: str | None, users: dict[str, str], channels: dict[str, str]) -> str:
    """Format message markup to human-readable text.

    Mentions resolve through the given maps, then fall back to the label
    stored in the token, then to the raw id.

    Args:
        markup: Message markup text.
        users: Mapping of user_id -> display_name.
        channels: Mapping of channel_id -> name.

    Returns:
        Formatted text with resolved mentions.
    """
    if not markup:
        return ''
    return render_document(parse(markup), users, channels)
