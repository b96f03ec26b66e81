"""Composer configuration loaded from the environment."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ComposerConfig(BaseSettings):
    """Settings for the message composer.

    Every field can be overridden with a ``CHAT_COMPOSER_``-prefixed
    environment variable or an entry in a local ``.env`` file.

    Attributes:
        max_message_length: Maximum serialized markup length accepted by submit().
        mention_suggestion_limit: Maximum candidates shown for ``@``.
        channel_suggestion_limit: Maximum candidates shown for ``#``.
        emoji_suggestion_limit: Maximum candidates shown for ``:``.
        catalog_path: Catalog JSON file used by the terminal composer.
        log_level: Logging level name for the terminal composer.
    """

    model_config = SettingsConfigDict(
        env_prefix='CHAT_COMPOSER_',
        env_file='.env',
        extra='ignore',
    )

    max_message_length: int = Field(default=40_000, gt=0)
    mention_suggestion_limit: int = Field(default=50, gt=0)
    channel_suggestion_limit: int = Field(default=50, gt=0)
    emoji_suggestion_limit: int = Field(default=20, gt=0)
    catalog_path: Path | None = None
    log_level: str = 'WARNING'


@lru_cache(maxsize=1)
def get_config() -> ComposerConfig:
    """Get the process-wide configuration."""
    return ComposerConfig()
