"""Entity resolution with caching for message formatting."""

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from chat_composer.catalog.models import CandidateSource
from chat_composer.formatting.text import CollectedEntities


logger = logging.getLogger(__name__)


@dataclass
class ResolvedContext:
    """Pre-resolved entity mappings for formatting.

    Ids the catalog does not know are left out, so rendering can fall back
    to the label stored in the markup.
    """

    users: dict[str, str] = field(default_factory=dict)  # user_id -> display_name
    channels: dict[str, str] = field(default_factory=dict)  # channel_id -> name

    def get_user_name(self, user_id: str) -> str:
        """Get resolved user name or fallback to ID."""
        return self.users.get(user_id, user_id)

    def get_channel_name(self, channel_id: str) -> str:
        """Get resolved channel name or fallback to ID."""
        return self.channels.get(channel_id, channel_id)


@dataclass
class _CacheEntry:
    """Internal cache entry with expiration."""

    value: str
    expires_at: datetime


async def _fetch(result):
    if inspect.isawaitable(result):
        return await result
    return result


class EntityResolver:
    """Resolver for mentioned users and channels with caching.

    Looks ids up in a candidate source (the same collaborator the suggestion
    engine queries) and keeps the names in memory for ``cache_ttl_seconds``.

    Usage:
        resolver = EntityResolver(catalog)
        entities = collect_entities(markup)
        context = await resolver.resolve(entities)
        text = format_text(markup, context.users, context.channels)
    """

    def __init__(
        self,
        source: CandidateSource,
        cache_ttl_seconds: int = 300,  # 5 minutes
    ):
        self.source = source
        self.cache_ttl = timedelta(seconds=cache_ttl_seconds)
        self._user_cache: dict[str, _CacheEntry] = {}
        self._channel_cache: dict[str, _CacheEntry] = {}

    async def resolve(self, entities: CollectedEntities) -> ResolvedContext:
        """Resolve all entities, returning a context object.

        A failing source is logged and leaves its ids unresolved.

        Args:
            entities: CollectedEntities with user_ids and channel_ids.

        Returns:
            ResolvedContext with mappings from IDs to names.
        """
        now = datetime.now()

        users = self._cached(self._user_cache, entities.user_ids, now)
        missing_users = [user_id for user_id in entities.user_ids if user_id not in users]
        if missing_users:
            try:
                members = await _fetch(self.source.members())
            except Exception as e:
                logger.warning(f'Failed to resolve {len(missing_users)} users: {e}')
                members = []
            wanted = set(missing_users)
            for member in members:
                if member.id in wanted:
                    name = member.display_name or member.id
                    users[member.id] = name
                    self._user_cache[member.id] = _CacheEntry(value=name, expires_at=now + self.cache_ttl)

        channels = self._cached(self._channel_cache, entities.channel_ids, now)
        missing_channels = [channel_id for channel_id in entities.channel_ids if channel_id not in channels]
        if missing_channels:
            try:
                known = await _fetch(self.source.channels())
            except Exception as e:
                logger.warning(f'Failed to resolve {len(missing_channels)} channels: {e}')
                known = []
            wanted = set(missing_channels)
            for channel in known:
                if channel.id in wanted:
                    name = channel.name or channel.id
                    channels[channel.id] = name
                    self._channel_cache[channel.id] = _CacheEntry(value=name, expires_at=now + self.cache_ttl)

        return ResolvedContext(users=users, channels=channels)

    @staticmethod
    def _cached(cache: dict[str, _CacheEntry], ids: list[str], now: datetime) -> dict[str, str]:
        resolved: dict[str, str] = {}
        for entity_id in ids:
            cached = cache.get(entity_id)
            if cached and cached.expires_at > now:
                resolved[entity_id] = cached.value
        return resolved

    def clear_cache(self) -> None:
        """Clear all cached entries."""
        self._user_cache.clear()
        self._channel_cache.clear()
