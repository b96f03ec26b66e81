"""Markup text -> Document.

Parsing never fails: anything that does not form a valid token, a matched
delimiter pair or a closed code fence is kept as literal text.
"""

import logging
from dataclasses import dataclass

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
    SpecialMentionKind,
    Text,
    UserMention,
)
from chat_composer.document.nodes import REFERENCE_PREFIX
from chat_composer.markup.patterns import (
    BULLET_ITEM,
    CHANNEL_LINK,
    DELIMITER_MARKS,
    EMOJI,
    FENCE,
    INLINE_TOKEN,
    ORDERED_ITEM,
    QUOTE_LINE,
    SPECIAL_MENTION,
    URL_LINK,
    USER_MENTION,
    unescape,
)


logger = logging.getLogger(__name__)


@dataclass
class _Literal:
    text: str


@dataclass
class _Delimiter:
    mark: Mark
    char: str


@dataclass
class _Link:
    href: str
    label: str


@dataclass
class _Code:
    text: str


@dataclass
class _Node:
    node: object


def _entity_token(token: str):
    """Convert an angle-bracket token to a piece, or None if unrecognized."""
    match = SPECIAL_MENTION.fullmatch(token)
    if match:
        return _Node(SpecialMention(kind=SpecialMentionKind(match.group(1))))

    match = USER_MENTION.fullmatch(token)
    if match:
        return _Node(UserMention(user_id=match.group(1), display_name=unescape(match.group(2) or '')))

    match = CHANNEL_LINK.fullmatch(token)
    if match:
        return _Node(ChannelMention(channel_id=match.group(1), name=unescape(match.group(2) or '')))

    match = EMOJI.fullmatch(token)
    if match:
        value = unescape(match.group(2) or '')
        if REFERENCE_PREFIX.match(value):
            return _Node(Emoji(shortcode=match.group(1), image_url=value))
        return _Node(Emoji(shortcode=match.group(1), unicode=value or None))

    match = URL_LINK.fullmatch(token)
    if match:
        href = unescape(match.group(1))
        label = unescape(match.group(2) or '')
        return _Link(href=href, label=label or href)

    return None


def _tokenize(line: str) -> list:
    pieces: list = []
    pos = 0
    for match in INLINE_TOKEN.finditer(line):
        if match.start() > pos:
            pieces.append(_Literal(line[pos : match.start()]))
        token = match.group(0)
        if token.startswith('`'):
            if len(token) > 2:
                pieces.append(_Code(unescape(token[1:-1])))
            else:
                pieces.append(_Literal(token))
        elif token.startswith('<'):
            piece = _entity_token(token)
            if piece is None:
                logger.debug(f'Keeping unrecognized token as text: {token!r}')
                piece = _Literal(token)
            pieces.append(piece)
        else:
            pieces.append(_Delimiter(DELIMITER_MARKS[token], token))
        pos = match.end()
    if pos < len(line):
        pieces.append(_Literal(line[pos:]))
    return pieces


def _pair_delimiters(pieces: list) -> set[int]:
    """Indexes of delimiters that form open/close pairs.

    A delimiter closes the nearest open delimiter of the same mark. Pairs
    enclosing nothing and delimiters left open stay literal.
    """
    paired: set[int] = set()
    open_at: dict[Mark, int] = {}
    for index, piece in enumerate(pieces):
        if not isinstance(piece, _Delimiter):
            continue
        opener = open_at.pop(piece.mark, None)
        if opener is None:
            open_at[piece.mark] = index
        elif index > opener + 1:
            paired.update((opener, index))
    if open_at:
        logger.debug(f'Unmatched delimiters kept as text: {sorted(m.value for m in open_at)}')
    return paired


def parse_inline(line: str) -> list:
    """Parse one markup line into inline nodes."""
    pieces = _tokenize(line)
    paired = _pair_delimiters(pieces)

    content: list = []
    active: set[Mark] = set()
    for index, piece in enumerate(pieces):
        if isinstance(piece, _Delimiter):
            if index in paired:
                active ^= {piece.mark}
            else:
                content.append(Text(text=piece.char, marks=active))
        elif isinstance(piece, _Literal):
            content.append(Text(text=unescape(piece.text), marks=active))
        elif isinstance(piece, _Link):
            content.append(Text(text=piece.label, marks=active, href=piece.href))
        elif isinstance(piece, _Code):
            content.append(Text(text=piece.text, marks={Mark.CODE}))
        else:
            content.append(piece.node)
    return content


def _closing_fence(lines: list[str], start: int) -> int | None:
    for index in range(start + 1, len(lines)):
        if lines[index] == FENCE:
            return index
    return None


def parse(markup: str | None) -> Document:
    """Convert markup text to a normalized document.

    Args:
        markup: Markup text; None or empty yields one empty paragraph.

    Returns:
        The parsed Document.
    """
    if not markup:
        return Document()

    lines = markup.replace('\r\n', '\n').replace('\r', '\n').split('\n')
    blocks: list = []
    index = 0
    while index < len(lines):
        line = lines[index]
        previous = blocks[-1] if blocks else None

        if line == FENCE:
            closing = _closing_fence(lines, index)
            if closing is not None:
                blocks.append(CodeBlock(code=unescape('\n'.join(lines[index + 1 : closing]))))
                index = closing + 1
                continue
            logger.debug(f'Unclosed code fence at line {index} kept as text')

        match = BULLET_ITEM.match(line)
        if match:
            item = Paragraph(content=parse_inline(match.group(1)))
            if isinstance(previous, BulletList):
                previous.items.append(item)
            else:
                blocks.append(BulletList(items=[item]))
            index += 1
            continue

        match = ORDERED_ITEM.match(line)
        if match:
            number = int(match.group(1))
            item = Paragraph(content=parse_inline(match.group(2)))
            if isinstance(previous, OrderedList) and number == previous.start + len(previous.items):
                previous.items.append(item)
            elif number <= 999_999:
                blocks.append(OrderedList(items=[item], start=number))
            else:
                blocks.append(Paragraph(content=parse_inline(line)))
            index += 1
            continue

        match = QUOTE_LINE.match(line)
        if match:
            quoted = Paragraph(content=parse_inline(match.group(1)))
            if isinstance(previous, Blockquote):
                previous.lines.append(quoted)
            else:
                blocks.append(Blockquote(lines=[quoted]))
            index += 1
            continue

        blocks.append(Paragraph(content=parse_inline(line)))
        index += 1

    return Document(blocks=blocks).normalized()
