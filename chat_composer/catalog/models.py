"""Catalog entries supplied by the host application."""

from enum import Enum
from typing import Awaitable, Iterable, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chat_composer.document.nodes import ID_PATTERN, REFERENCE_PREFIX, SHORTCODE_PATTERN


class ChannelKind(str, Enum):
    """Channel visibility."""

    PUBLIC = 'public'
    PRIVATE = 'private'
    DM = 'dm'
    GROUP_DM = 'group_dm'


class Member(BaseModel):
    """A workspace member that can be mentioned."""

    id: str = Field(pattern=ID_PATTERN)
    display_name: str
    avatar_url: str | None = None


class Channel(BaseModel):
    """A channel that can be referenced with ``#``."""

    id: str = Field(pattern=ID_PATTERN)
    name: str
    kind: ChannelKind = ChannelKind.PUBLIC

    @property
    def is_conversation(self) -> bool:
        """True for direct and group direct messages."""
        return self.kind in (ChannelKind.DM, ChannelKind.GROUP_DM)


class CustomEmoji(BaseModel):
    """A workspace emoji; built-in emoji use the same shape."""

    shortcode: str = Field(pattern=SHORTCODE_PATTERN)
    unicode: str | None = None
    image_url: str | None = None

    @field_validator('image_url')
    @classmethod
    def _absolute_image_url(cls, value: str | None) -> str | None:
        if value and not REFERENCE_PREFIX.match(value):
            raise ValueError(f'Emoji image must be an absolute URL: {value!r}')
        return value or None


class CandidateSource(Protocol):
    """Collaborator that supplies catalog snapshots for one query.

    Each method may return the entries directly or an awaitable resolving
    to them; awaitables are only supported by the async engine API.
    """

    def members(self) -> Iterable[Member] | Awaitable[Iterable[Member]]: ...

    def channels(self) -> Iterable[Channel] | Awaitable[Iterable[Channel]]: ...

    def custom_emoji(self) -> Iterable[CustomEmoji] | Awaitable[Iterable[CustomEmoji]]: ...


class Catalog(BaseModel):
    """Static catalog snapshot; usable directly as a CandidateSource."""

    member_list: list[Member] = Field(default_factory=list, alias='members')
    channel_list: list[Channel] = Field(default_factory=list, alias='channels')
    emoji_list: list[CustomEmoji] = Field(default_factory=list, alias='custom_emoji')

    model_config = ConfigDict(populate_by_name=True)

    def members(self) -> list[Member]:
        return list(self.member_list)

    def channels(self) -> list[Channel]:
        return list(self.channel_list)

    def custom_emoji(self) -> list[CustomEmoji]:
        return list(self.emoji_list)

    def get_member(self, user_id: str) -> Member | None:
        """Find a member by id."""
        for member in self.member_list:
            if member.id == user_id:
                return member
        return None

    def get_channel(self, channel_id: str) -> Channel | None:
        """Find a channel by id."""
        for channel in self.channel_list:
            if channel.id == channel_id:
                return channel
        return None
