"""Pydantic models with automatic message formatting."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, PrivateAttr, computed_field

from chat_composer.formatting.resolver import ResolvedContext
from chat_composer.formatting.text import format_text


PREVIEW_LENGTH = 100


class MessagePreview(BaseModel):
    """A sent message with automatic text formatting.

    Use the `from_raw()` factory method to create instances with
    a ResolvedContext for formatting.

    Attributes:
        channel_id: Channel the message was posted to.
        channel_name: Channel name (may be None if not yet resolved).
        author_id: Member who wrote the message.
        author_name: Author name (may be None if not yet resolved).
        markup: Message markup text as sent.
        timestamp: When the message was sent.
        edited: True when the message replaced an earlier version.

    Computed Fields:
        text_preview: Formatted text with resolved mentions (max 100 chars).
        formatted_author: Resolved author display name.
        formatted_channel: Resolved channel name with # prefix.
    """

    model_config = ConfigDict(populate_by_name=True)

    channel_id: str
    channel_name: str | None = None
    author_id: str | None = None
    author_name: str | None = None
    markup: str = ''
    timestamp: datetime | None = None
    edited: bool = False

    # Private context for formatting (not serialized)
    _context: ResolvedContext | None = PrivateAttr(default=None)

    @computed_field
    @property
    def text_preview(self) -> str:
        """Formatted text with resolved mentions (max 100 chars)."""
        users = self._context.users if self._context else {}
        channels = self._context.channels if self._context else {}
        formatted = format_text(self.markup, users, channels)
        return self._truncate(formatted, PREVIEW_LENGTH)

    @computed_field
    @property
    def formatted_author(self) -> str:
        """Resolved author display name."""
        if self.author_name:
            return self.author_name
        if self._context and self.author_id:
            return self._context.get_user_name(self.author_id)
        return self.author_id or 'unknown'

    @computed_field
    @property
    def formatted_channel(self) -> str:
        """Resolved channel name with # prefix."""
        if self.channel_name:
            return f'#{self.channel_name}'
        if self._context:
            return f'#{self._context.get_channel_name(self.channel_id)}'
        return f'#{self.channel_id}'

    @staticmethod
    def _truncate(text: str, max_len: int) -> str:
        """Truncate text with ellipsis if needed."""
        if len(text) <= max_len:
            return text
        return text[: max_len - 3] + '...'

    @classmethod
    def from_raw(
        cls,
        *,
        channel_id: str,
        markup: str,
        channel_name: str | None = None,
        author_id: str | None = None,
        author_name: str | None = None,
        timestamp: datetime | None = None,
        edited: bool = False,
        context: ResolvedContext | None = None,
    ) -> 'MessagePreview':
        """Create a preview bound to a resolution context.

        Args:
            channel_id: Channel the message was posted to.
            markup: Message markup text.
            channel_name: Channel name if already known.
            author_id: Member who wrote the message.
            author_name: Author name if already known.
            timestamp: When the message was sent.
            edited: Whether this was an edit.
            context: ResolvedContext for formatting.

        Returns:
            MessagePreview with context set.
        """
        preview = cls(
            channel_id=channel_id,
            channel_name=channel_name,
            author_id=author_id,
            author_name=author_name,
            markup=markup,
            timestamp=timestamp,
            edited=edited,
        )
        preview._context = context
        return preview
