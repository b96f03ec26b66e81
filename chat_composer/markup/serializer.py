"""Document -> markup text."""

from collections.abc import Iterable

from chat_composer.document import (
    Blockquote,
    BulletList,
    ChannelMention,
    CodeBlock,
    Document,
    Emoji,
    Mark,
    OrderedList,
    Paragraph,
    SpecialMention,
    Text,
    UserMention,
)
from chat_composer.markup.patterns import (
    DELIMITERS,
    FENCE,
    escape_code,
    escape_href,
    escape_line_marker,
    escape_text,
)


def _labelled(prefix: str, identity: str, label: str | None) -> str:
    if label:
        return f'<{prefix}{identity}|{escape_text(label)}>'
    return f'<{prefix}{identity}>'


def serialize_run(run: Text) -> str:
    """Serialize one text run with its own delimiters.

    Every run is wrapped independently (bold outermost, strike innermost),
    so overlapping styles become consecutive runs, never crossing pairs.
    """
    if Mark.CODE in run.marks:
        return f'`{escape_code(run.text)}`'

    if run.href is None:
        body = escape_text(run.text)
    elif run.text == run.href:
        body = f'<{escape_href(run.href)}>'
    else:
        body = f'<{escape_href(run.href)}|{escape_text(run.text)}>'

    for mark in reversed(DELIMITERS):
        if mark in run.marks:
            delimiter = DELIMITERS[mark]
            body = f'{delimiter}{body}{delimiter}'
    return body


def serialize_node(node) -> str:
    """Serialize a single inline node."""
    if isinstance(node, Text):
        return serialize_run(node)
    if isinstance(node, UserMention):
        return _labelled('@', node.user_id, node.display_name)
    if isinstance(node, SpecialMention):
        return f'<!{node.kind.value}>'
    if isinstance(node, ChannelMention):
        return _labelled('#', node.channel_id, node.name)
    if isinstance(node, Emoji):
        if node.image_url:
            return f'<:{node.shortcode}|{escape_href(node.image_url)}>'
        return _labelled(':', node.shortcode, node.unicode)
    raise TypeError(f'Unknown inline node: {type(node).__name__}')


def serialize_inline(content: Iterable) -> str:
    """Serialize inline content to one markup line."""
    return ''.join(serialize_node(node) for node in content)


def _block_lines(block) -> list[str]:
    if isinstance(block, Paragraph):
        return [escape_line_marker(serialize_inline(block.content))]
    if isinstance(block, BulletList):
        return [f'- {serialize_inline(item.content)}' for item in block.items]
    if isinstance(block, OrderedList):
        return [f'{block.start + i}. {serialize_inline(item.content)}' for i, item in enumerate(block.items)]
    if isinstance(block, Blockquote):
        lines = []
        for line in block.lines:
            body = serialize_inline(line.content)
            lines.append(f'> {body}' if body else '>')
        return lines
    if isinstance(block, CodeBlock):
        return [FENCE, escape_code(block.code, keep_newlines=True), FENCE]
    raise TypeError(f'Unknown block: {type(block).__name__}')


def serialize(document: Document) -> str:
    """Convert a document to markup text.

    The document is normalized first, so equivalent trees always produce
    the same string.

    Args:
        document: Document to serialize.

    Returns:
        Markup text, one line per paragraph, list item or quote line.
    """
    lines: list[str] = []
    for block in document.normalized().blocks:
        lines.extend(_block_lines(block))
    return '\n'.join(lines)
