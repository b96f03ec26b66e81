"""Markup token patterns and escaping rules."""

import re

from chat_composer.document.nodes import Mark


# Entity tokens (pre-compiled for performance)
USER_MENTION = re.compile(r'<@([A-Za-z0-9_.\-]+)(?:\|([^>]*))?>')
CHANNEL_LINK = re.compile(r'<#([A-Za-z0-9_.\-]+)(?:\|([^>]*))?>')
SPECIAL_MENTION = re.compile(r'<!(here|channel|everyone)(?:\|[^>]*)?>')
EMOJI = re.compile(r'<:([A-Za-z0-9_+\-]+)(?:\|([^>]*))?>')
URL_LINK = re.compile(r'<((?:[A-Za-z][A-Za-z0-9+.\-]*:|/)[^<>|\s]*)(?:\|([^>]*))?>')

# Any angle-bracket token, code span or emphasis delimiter inside one line
INLINE_TOKEN = re.compile(r'`[^`]*`|<[^<>]*>|[*_~]')

# Block syntax
FENCE = '```'
BULLET_ITEM = re.compile(r'^- (.*)$')
ORDERED_ITEM = re.compile(r'^(\d{1,9})\. (.*)$')
QUOTE_LINE = re.compile(r'^> ?(.*)$')
BULLET_MARKER = re.compile(r'^- ')
ORDERED_MARKER = re.compile(r'^(\d+)\. ')

DELIMITERS: dict[Mark, str] = {
    Mark.BOLD: '*',
    Mark.ITALIC: '_',
    Mark.STRIKE: '~',
}
DELIMITER_MARKS: dict[str, Mark] = {char: mark for mark, char in DELIMITERS.items()}

HTML_ENTITY = re.compile(r'&(amp|lt|gt|nbsp|quot|#\d{1,7});')

# HTML entity mappings
HTML_ENTITIES = {
    'amp': '&',
    'lt': '<',
    'gt': '>',
    'nbsp': '\u00a0',
    'quot': '"',
}

ESCAPES = {
    '&': '&amp;',
    '<': '&lt;',
    '>': '&gt;',
}

TEXT_SPECIAL = re.compile(r'[&<>*_~`\x00-\x1f\x7f]')
CODE_SPECIAL = re.compile(r'[&<>`\x00-\x1f\x7f]')
CODE_BLOCK_SPECIAL = re.compile(r'[&<>`\x00-\x09\x0b-\x1f\x7f]')
HREF_SPECIAL = re.compile(r'[&<>|\s\x00-\x1f\x7f]')


def _entity(match: re.Match) -> str:
    char = match.group(0)
    return ESCAPES.get(char) or f'&#{ord(char)};'


def escape_text(text: str) -> str:
    """Escape plain text so no character reads as markup."""
    return TEXT_SPECIAL.sub(_entity, text)


def escape_code(text: str, keep_newlines: bool = False) -> str:
    """Escape code content; emphasis characters stay literal inside code."""
    pattern = CODE_BLOCK_SPECIAL if keep_newlines else CODE_SPECIAL
    return pattern.sub(_entity, text)


def escape_href(href: str) -> str:
    """Escape a link target for use inside an angle-bracket token."""
    return HREF_SPECIAL.sub(_entity, href)


def escape_line_marker(line: str) -> str:
    """Escape a paragraph line that would otherwise read as a list item."""
    line = BULLET_MARKER.sub('&#45; ', line)
    return ORDERED_MARKER.sub(r'\1&#46; ', line)


def unescape(text: str) -> str:
    """Decode entities; unknown or out-of-range ones stay literal."""

    def replace_entity(match: re.Match) -> str:
        entity = match.group(1)
        if not entity.startswith('#'):
            return HTML_ENTITIES.get(entity, match.group(0))
        codepoint = int(entity[1:])
        if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
            return match.group(0)
        return chr(codepoint)

    return HTML_ENTITY.sub(replace_entity, text)
