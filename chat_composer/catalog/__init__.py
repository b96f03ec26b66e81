"""Member, channel and emoji catalogs consumed by the composer."""

from chat_composer.catalog.models import (
    CandidateSource,
    Catalog,
    Channel,
    ChannelKind,
    CustomEmoji,
    Member,
)
from chat_composer.catalog.storage import CatalogStorage


__all__ = [
    'CandidateSource',
    'Catalog',
    'CatalogStorage',
    'Channel',
    'ChannelKind',
    'CustomEmoji',
    'Member',
]
