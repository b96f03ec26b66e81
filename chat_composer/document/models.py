"""Block structure and the editable message document."""

import logging
from collections.abc import Sequence
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from chat_composer.document.editing import (
    InvalidPositionError,
    Position,
    content_length,
    content_text,
    merge_runs,
    node_length,
    split_content,
    style_before,
)
from chat_composer.document.nodes import Inline, Mark, Text, is_entity


logger = logging.getLogger(__name__)


class Paragraph(BaseModel):
    """A single line of inline content."""

    type: Literal['paragraph'] = 'paragraph'
    content: list[Inline] = Field(default_factory=list)

    @property
    def length(self) -> int:
        return content_length(self.content)

    def is_blank(self) -> bool:
        """True if the paragraph holds no entity and only whitespace text."""
        return all(isinstance(node, Text) and not node.text.strip() for node in self.content)


class BulletList(BaseModel):
    """Unordered list; each item is one paragraph."""

    type: Literal['bullet_list'] = 'bullet_list'
    items: list[Paragraph] = Field(default_factory=list)


class OrderedList(BaseModel):
    """Numbered list counting up from ``start``."""

    type: Literal['ordered_list'] = 'ordered_list'
    items: list[Paragraph] = Field(default_factory=list)
    start: int = Field(default=1, ge=0, le=999_999)


class Blockquote(BaseModel):
    """Quoted lines."""

    type: Literal['blockquote'] = 'blockquote'
    lines: list[Paragraph] = Field(default_factory=list)


class CodeBlock(BaseModel):
    """Preformatted code; may span several lines."""

    type: Literal['code_block'] = 'code_block'
    code: str = ''

    @property
    def length(self) -> int:
        return len(self.code)


Block = Annotated[
    Union[Paragraph, BulletList, OrderedList, Blockquote, CodeBlock],
    Field(discriminator='type'),
]

TextBlock = Union[Paragraph, CodeBlock]


def _children(block) -> list | None:
    """Paragraph list of a container block, None for leaf blocks."""
    if isinstance(block, (BulletList, OrderedList)):
        return block.items
    if isinstance(block, Blockquote):
        return block.lines
    return None


def _normalize_block(block):
    if isinstance(block, Paragraph):
        return Paragraph(content=merge_runs(block.content))
    if isinstance(block, CodeBlock):
        return CodeBlock(code=block.code)

    paragraphs = [Paragraph(content=merge_runs(p.content)) for p in _children(block)]
    if not paragraphs:
        return None
    if isinstance(block, BulletList):
        return BulletList(items=paragraphs)
    if isinstance(block, OrderedList):
        return OrderedList(items=paragraphs, start=block.start)
    return Blockquote(lines=paragraphs)


def _trim_content(content: list, leading: bool) -> list:
    """Cut whitespace from one end of inline content; code runs are kept."""
    nodes = list(content)
    index = 0 if leading else -1
    while nodes:
        node = nodes[index]
        if not isinstance(node, Text) or Mark.CODE in node.marks:
            break
        text = node.text.lstrip() if leading else node.text.rstrip()
        if text:
            nodes[index] = node.model_copy(update={'text': text})
            break
        nodes.pop(index)
    return nodes


def _trim_edge(block, leading: bool) -> bool:
    """Trim the outer text block of ``block``; True if the block is left empty."""
    if isinstance(block, CodeBlock):
        return False
    if isinstance(block, Paragraph):
        block.content = _trim_content(block.content, leading)
        return not block.content
    children = _children(block)
    edge = children[0] if leading else children[-1]
    edge.content = _trim_content(edge.content, leading)
    return False


class Document(BaseModel):
    """The rich content of one message under edit.

    Text blocks (top-level paragraphs, list items, quote lines and code
    blocks) are numbered in document order; a ``Position`` addresses one of
    them plus an offset inside it.
    """

    blocks: list[Block] = Field(default_factory=lambda: [Paragraph()])

    def textblocks(self) -> list[TextBlock]:
        """All text blocks in document order."""
        result: list[TextBlock] = []
        for block in self.blocks:
            children = _children(block)
            if children is None:
                result.append(block)
            else:
                result.extend(children)
        return result

    def textblock(self, index: int) -> TextBlock:
        """Get a text block by index.

        Raises:
            InvalidPositionError: If there is no such block.
        """
        blocks = self.textblocks()
        if index < 0 or index >= len(blocks):
            raise InvalidPositionError(f'No text block at index {index}')
        return blocks[index]

    def end_position(self) -> Position:
        """Position after the last character of the document."""
        blocks = self.textblocks()
        if not blocks:
            self.blocks.append(Paragraph())
            return Position(0, 0)
        return Position(len(blocks) - 1, blocks[-1].length)

    def is_blank(self) -> bool:
        """True if nothing worth sending is present.

        A document is non-blank once it holds an entity, non-whitespace text
        or a code block with non-whitespace code.
        """
        for block in self.textblocks():
            if isinstance(block, CodeBlock):
                if block.code.strip():
                    return False
            elif not block.is_blank():
                return False
        return True

    def entities(self) -> list:
        """All entity nodes in document order."""
        return [
            node
            for block in self.textblocks()
            if isinstance(block, Paragraph)
            for node in block.content
            if is_entity(node)
        ]

    def normalized(self) -> 'Document':
        """Canonical copy used for comparison and serialization.

        Merges equally styled neighbouring runs, drops empty runs and empty
        containers, and joins neighbouring lists and quotes that would read
        back as one block.
        """
        blocks: list = []
        for block in self.blocks:
            block = _normalize_block(block)
            if block is None:
                continue
            previous = blocks[-1] if blocks else None
            if isinstance(block, BulletList) and isinstance(previous, BulletList):
                previous.items.extend(block.items)
                continue
            if isinstance(block, Blockquote) and isinstance(previous, Blockquote):
                previous.lines.extend(block.lines)
                continue
            if (
                isinstance(block, OrderedList)
                and isinstance(previous, OrderedList)
                and block.start == previous.start + len(previous.items)
            ):
                previous.items.extend(block.items)
                continue
            blocks.append(block)
        return Document(blocks=blocks or [Paragraph()])

    def trimmed(self) -> 'Document':
        """Normalized copy without surrounding whitespace.

        Whitespace is cut from the start of the first text block and the end
        of the last one, and top-level paragraphs left empty at either edge
        are dropped. List items and code blocks keep their structure.
        """
        blocks = self.normalized().blocks
        while blocks and _trim_edge(blocks[0], leading=True):
            blocks.pop(0)
        while blocks and _trim_edge(blocks[-1], leading=False):
            blocks.pop()
        return Document(blocks=blocks or [Paragraph()])

    def structurally_equal(self, other: 'Document') -> bool:
        """Compare documents ignoring incidental text-run splitting."""
        return self.normalized() == other.normalized()

    def _check(self, position: Position) -> TextBlock:
        block = self.textblock(position.block)
        if position.offset < 0 or position.offset > block.length:
            raise InvalidPositionError(f'Offset {position.offset} outside block {position.block}')
        return block

    def _locate(self, index: int) -> tuple[list, int]:
        """Container list holding text block ``index`` and its index there."""
        seen = 0
        for i, block in enumerate(self.blocks):
            children = _children(block)
            if children is None:
                if seen == index:
                    return self.blocks, i
                seen += 1
                continue
            if index < seen + len(children):
                return children, index - seen
            seen += len(children)
        raise InvalidPositionError(f'No text block at index {index}')

    def text_before(self, position: Position) -> str:
        """Flattened text of a block up to ``position``."""
        block = self._check(position)
        if isinstance(block, CodeBlock):
            return block.code[: position.offset]
        left, _ = split_content(block.content, position.offset)
        return content_text(left)

    def insert_text(
        self,
        position: Position,
        text: str,
        marks: frozenset[Mark] | None = None,
        href: str | None = None,
    ) -> Position:
        """Insert literal text; newlines start new blocks.

        Args:
            position: Where to insert.
            text: Characters to insert.
            marks: Marks for the new run. Defaults to the marks of the run
                left of the caret, without its link.
            href: Link target for the new run.

        Returns:
            Caret position after the inserted text.
        """
        block = self._check(position)
        text = text.replace('\r\n', '\n').replace('\r', '\n')

        if isinstance(block, CodeBlock):
            block.code = block.code[: position.offset] + text + block.code[position.offset :]
            return Position(position.block, position.offset + len(text))

        lines = text.split('\n')
        for i, line in enumerate(lines):
            if i > 0:
                position = self.split_block(position)
            if not line:
                continue
            paragraph = self.textblock(position.block)
            run_marks = style_before(paragraph.content, position.offset) if marks is None else marks
            run = Text(text=line, marks=run_marks, href=href)
            position = self._splice(paragraph, position, [run])
        return position

    def insert_nodes(self, position: Position, nodes: Sequence) -> Position:
        """Insert inline nodes (entities or text runs) at ``position``.

        Raises:
            InvalidPositionError: If the position is inside a code block.
        """
        block = self._check(position)
        if isinstance(block, CodeBlock):
            raise InvalidPositionError('Inline nodes cannot be inserted into a code block')
        return self._splice(block, position, list(nodes))

    def _splice(self, paragraph: Paragraph, position: Position, nodes: list) -> Position:
        left, right = split_content(paragraph.content, position.offset)
        paragraph.content = left + nodes + right
        return Position(position.block, position.offset + sum(node_length(n) for n in nodes))

    def delete_range(self, start: Position, end: Position) -> Position:
        """Delete ``[start, end)`` inside one text block.

        Returns:
            The collapsed caret position.
        """
        if start.block != end.block or start.offset > end.offset:
            raise InvalidPositionError(f'Cannot delete from {start} to {end}')
        block = self._check(end)
        self._check(start)

        if isinstance(block, CodeBlock):
            block.code = block.code[: start.offset] + block.code[end.offset :]
        else:
            left, _ = split_content(block.content, start.offset)
            _, right = split_content(block.content, end.offset)
            block.content = left + right
        return start

    def split_block(self, position: Position) -> Position:
        """Break a text block in two at ``position``.

        Paragraphs, list items and quote lines gain a sibling of the same
        kind; code blocks get a newline.
        """
        block = self._check(position)
        if isinstance(block, CodeBlock):
            return self.insert_text(position, '\n')

        container, index = self._locate(position.block)
        left, right = split_content(block.content, position.offset)
        block.content = left
        container.insert(index + 1, Paragraph(content=right))
        return Position(position.block + 1, 0)

    def clear(self) -> Position:
        """Reset to a single empty paragraph."""
        self.blocks = [Paragraph()]
        logger.debug('Document cleared')
        return Position(0, 0)
