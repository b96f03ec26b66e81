"""Inline node taxonomy: formatted text runs and entity references."""

import re
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


ID_PATTERN = r'^[A-Za-z0-9_.\-]+$'
SHORTCODE_PATTERN = r'^[A-Za-z0-9_+\-]+$'

# A URI scheme ("https:", "mailto:") or an absolute path
REFERENCE_PREFIX = re.compile(r'^(?:[A-Za-z][A-Za-z0-9+.\-]*:|/)')


class Mark(str, Enum):
    """Inline formatting applied to a text run."""

    BOLD = 'bold'
    ITALIC = 'italic'
    STRIKE = 'strike'
    CODE = 'code'
    LINK = 'link'


class Text(BaseModel):
    """A run of literal characters sharing one set of marks.

    ``link`` is present exactly when ``href`` is set. ``code`` suppresses
    every other mark on the run, links included.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal['text'] = 'text'
    text: str
    marks: frozenset[Mark] = frozenset()
    href: str | None = None

    @model_validator(mode='before')
    @classmethod
    def _normalize_marks(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        marks = {Mark(m) for m in data.get('marks') or ()}
        href = data.get('href') or None

        if Mark.CODE in marks:
            marks = {Mark.CODE}
            href = None
        elif href:
            if not REFERENCE_PREFIX.match(href):
                raise ValueError(f'Link target must be absolute: {href!r}')
            marks.add(Mark.LINK)
        else:
            marks.discard(Mark.LINK)

        data['marks'] = frozenset(marks)
        data['href'] = href
        return data

    @property
    def style(self) -> tuple[frozenset[Mark], str | None]:
        """Marks and link target; runs with equal style may be merged."""
        return self.marks, self.href


class UserMention(BaseModel):
    """Reference to a workspace member.

    ``display_name`` is a snapshot taken when the mention was inserted and
    is only a rendering fallback; ``user_id`` is the identity.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal['user_mention'] = 'user_mention'
    user_id: str = Field(pattern=ID_PATTERN)
    display_name: str = ''


class SpecialMentionKind(str, Enum):
    """Built-in group mentions."""

    EVERYONE = 'everyone'
    HERE = 'here'
    CHANNEL = 'channel'


class SpecialMention(BaseModel):
    """Reference to a built-in group (``@here``, ``@channel``, ``@everyone``)."""

    model_config = ConfigDict(frozen=True)

    type: Literal['special_mention'] = 'special_mention'
    kind: SpecialMentionKind


class ChannelMention(BaseModel):
    """Reference to a channel; ``name`` is a snapshot label."""

    model_config = ConfigDict(frozen=True)

    type: Literal['channel_mention'] = 'channel_mention'
    channel_id: str = Field(pattern=ID_PATTERN)
    name: str = ''


class Emoji(BaseModel):
    """A standard or custom emoji identified by its shortcode.

    At most one of ``unicode`` and ``image_url`` is kept; when both are
    given the unicode value wins. ``image_url`` must be absolute, like
    link targets.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal['emoji'] = 'emoji'
    shortcode: str = Field(pattern=SHORTCODE_PATTERN)
    unicode: str | None = None
    image_url: str | None = None

    @model_validator(mode='before')
    @classmethod
    def _single_representation(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        unicode = data.get('unicode') or None
        image_url = data.get('image_url') or None
        if unicode is not None:
            if REFERENCE_PREFIX.match(unicode):
                raise ValueError(f'Emoji value looks like a URL: {unicode!r}')
            image_url = None
        elif image_url is not None and not REFERENCE_PREFIX.match(image_url):
            raise ValueError(f'Emoji image must be an absolute URL: {image_url!r}')
        data['unicode'] = unicode
        data['image_url'] = image_url
        return data


Entity = Union[UserMention, SpecialMention, ChannelMention, Emoji]
ENTITY_TYPES = (UserMention, SpecialMention, ChannelMention, Emoji)

Inline = Annotated[
    Union[Text, UserMention, SpecialMention, ChannelMention, Emoji],
    Field(discriminator='type'),
]


def is_entity(node: Any) -> bool:
    """True if ``node`` references an external identity."""
    return isinstance(node, ENTITY_TYPES)
