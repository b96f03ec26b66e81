"""Tests for message formatting."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from chat_composer.catalog import Catalog, Channel, Member
from chat_composer.document import SpecialMentionKind
from chat_composer.formatting import (
    CollectedEntities,
    EntityResolver,
    MessagePreview,
    ResolvedContext,
    collect_entities,
    format_text,
)


class TestCollectEntities:
    """Tests for entity collection from markup."""

    def test_collect_user_mentions(self):
        entities = collect_entities('Hello <@U123ABC>!')
        assert entities.user_ids == ['U123ABC']
        assert entities.channel_ids == []

    def test_collect_in_order_without_duplicates(self):
        entities = collect_entities('<@U2> mentioned <@U1> and <@U2|bob>')
        assert entities.user_ids == ['U2', 'U1']

    def test_collect_channels_with_and_without_name(self):
        entities = collect_entities('See <#C1> and <#C2|general>')
        assert entities.channel_ids == ['C1', 'C2']

    def test_collect_special_mentions(self):
        entities = collect_entities('<!here> <!everyone> <!here>')
        assert entities.special_mentions == [SpecialMentionKind.HERE, SpecialMentionKind.EVERYONE]

    def test_collect_across_blocks(self):
        entities = collect_entities('- <@U1>\n> <#C1>\n1. <!channel>')
        assert entities.user_ids == ['U1']
        assert entities.channel_ids == ['C1']
        assert entities.special_mentions == [SpecialMentionKind.CHANNEL]

    def test_code_is_not_scanned(self):
        entities = collect_entities('`<@U1>`\n```\n<@U2>\n```')
        assert not entities

    def test_emoji_not_collected(self):
        assert not collect_entities('<:tada|🎉>')

    def test_empty_text(self):
        assert not collect_entities('')
        assert not collect_entities(None)

    def test_merge(self):
        e1 = CollectedEntities(user_ids=['U1'], channel_ids=['C1'])
        e2 = CollectedEntities(user_ids=['U2', 'U1'], special_mentions=[SpecialMentionKind.HERE])
        e1.merge(e2)
        assert e1.user_ids == ['U1', 'U2']
        assert e1.channel_ids == ['C1']
        assert e1.special_mentions == [SpecialMentionKind.HERE]


class TestFormatText:
    """Tests for text formatting."""

    def test_format_user_mention(self):
        assert format_text('Hello <@U123>!', {'U123': 'john_doe'}, {}) == 'Hello @john_doe!'

    def test_resolved_name_beats_snapshot(self):
        assert format_text('Hello <@U1|old>', {'U1': 'new'}, {}) == 'Hello @new'

    def test_snapshot_label_fallback(self):
        assert format_text('Hello <@U1|alice>', {}, {}) == 'Hello @alice'

    def test_format_unknown_user(self):
        assert format_text('Hello <@U999>!', {}, {}) == 'Hello @U999!'

    def test_format_channels(self):
        assert format_text('See <#C123|general>', {}, {}) == 'See #general'
        assert format_text('See <#C123>', {}, {'C123': 'random'}) == 'See #random'

    def test_format_links(self):
        assert format_text('Check <https://example.com|this link>', {}, {}) == 'Check this link'
        assert format_text('Check <https://example.com>', {}, {}) == 'Check https://example.com'

    def test_format_special_mentions(self):
        assert format_text('Hey <!here>', {}, {}) == 'Hey @here'
        assert format_text('Hey <!everyone>', {}, {}) == 'Hey @everyone'

    def test_format_emoji(self):
        assert format_text('Done <:tada|🎉> <:parrot|https://e.example/p.gif>', {}, {}) == 'Done 🎉 :parrot:'

    def test_marks_dropped_and_entities_decoded(self):
        assert format_text('*Tom* &amp; _Jerry_ &lt;3', {}, {}) == 'Tom & Jerry <3'

    def test_blocks(self):
        markup = 'intro\n- a\n3. b\n> quote\n```\nx = 1\n```'
        assert format_text(markup, {}, {}) == 'intro\n• a\n3. b\n> quote\nx = 1'

    def test_format_multiple_users_cyrillic(self):
        text = 'если <@U035N3R77GW> и <@U0388MHA23B> будут ревьювать'
        result = format_text(text, {'U035N3R77GW': 'john.doe', 'U0388MHA23B': 'jane.smith'}, {})
        assert result == 'если @john.doe и @jane.smith будут ревьювать'

    def test_format_empty_text(self):
        assert format_text('', {}, {}) == ''
        assert format_text(None, {}, {}) == ''


class TestResolvedContext:
    """Tests for ResolvedContext."""

    def test_get_user_name(self):
        context = ResolvedContext(users={'U123': 'john'}, channels={})
        assert context.get_user_name('U123') == 'john'
        assert context.get_user_name('U999') == 'U999'

    def test_get_channel_name(self):
        context = ResolvedContext(users={}, channels={'C123': 'general'})
        assert context.get_channel_name('C123') == 'general'
        assert context.get_channel_name('C999') == 'C999'


class TestEntityResolver:
    """Tests for EntityResolver."""

    @pytest.mark.asyncio
    async def test_resolve_from_catalog(self):
        catalog = Catalog(
            members=[Member(id='U1', display_name='alice'), Member(id='U2', display_name='bob')],
            channels=[Channel(id='C1', name='general')],
        )
        resolver = EntityResolver(catalog)

        context = await resolver.resolve(collect_entities('<@U1> <@U3> in <#C1>'))

        assert context.users == {'U1': 'alice'}
        assert context.channels == {'C1': 'general'}

    @pytest.mark.asyncio
    async def test_cache_avoids_second_lookup(self):
        source = MagicMock()
        source.members = AsyncMock(return_value=[Member(id='U1', display_name='alice')])
        source.channels = AsyncMock(return_value=[])
        resolver = EntityResolver(source)
        entities = CollectedEntities(user_ids=['U1'])

        await resolver.resolve(entities)
        context = await resolver.resolve(entities)

        assert context.users == {'U1': 'alice'}
        source.members.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expired_cache_refetches(self):
        source = MagicMock()
        source.members = AsyncMock(return_value=[Member(id='U1', display_name='alice')])
        resolver = EntityResolver(source, cache_ttl_seconds=0)
        entities = CollectedEntities(user_ids=['U1'])

        await resolver.resolve(entities)
        await resolver.resolve(entities)

        assert source.members.await_count == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self):
        source = MagicMock()
        source.members = AsyncMock(return_value=[Member(id='U1', display_name='alice')])
        resolver = EntityResolver(source)
        entities = CollectedEntities(user_ids=['U1'])

        await resolver.resolve(entities)
        resolver.clear_cache()
        await resolver.resolve(entities)

        assert source.members.await_count == 2

    @pytest.mark.asyncio
    async def test_source_failure_leaves_ids_unresolved(self):
        source = MagicMock()
        source.members = AsyncMock(side_effect=RuntimeError('offline'))
        resolver = EntityResolver(source)

        context = await resolver.resolve(CollectedEntities(user_ids=['U1']))

        assert context.users == {}
        assert format_text('<@U1|alice>', context.users, context.channels) == '@alice'

    @pytest.mark.asyncio
    async def test_nothing_to_resolve(self):
        source = MagicMock()
        resolver = EntityResolver(source)

        context = await resolver.resolve(CollectedEntities())

        assert context == ResolvedContext()
        source.members.assert_not_called()


class TestMessagePreview:
    """Tests for MessagePreview Pydantic model."""

    def test_text_preview_with_context(self):
        context = ResolvedContext(users={'U123': 'john_doe'}, channels={'C456': 'general'})
        preview = MessagePreview.from_raw(channel_id='C456', markup='Hey <@U123>, check <#C456>', context=context)
        assert preview.text_preview == 'Hey @john_doe, check #general'

    def test_text_preview_truncation(self):
        preview = MessagePreview.from_raw(channel_id='C1', markup='A' * 200)
        assert len(preview.text_preview) == 100
        assert preview.text_preview.endswith('...')

    def test_formatted_author(self):
        context = ResolvedContext(users={'U123': 'alice'}, channels={})
        resolved = MessagePreview.from_raw(channel_id='C1', markup='', author_id='U123', context=context)
        explicit = MessagePreview.from_raw(channel_id='C1', markup='', author_name='explicit')
        unresolved = MessagePreview.from_raw(channel_id='C1', markup='', author_id='U456')
        anonymous = MessagePreview.from_raw(channel_id='C1', markup='')

        assert resolved.formatted_author == 'alice'
        assert explicit.formatted_author == 'explicit'
        assert unresolved.formatted_author == 'U456'
        assert anonymous.formatted_author == 'unknown'

    def test_formatted_channel(self):
        context = ResolvedContext(users={}, channels={'C123': 'random'})
        assert MessagePreview.from_raw(channel_id='C123', markup='', context=context).formatted_channel == '#random'
        assert MessagePreview.from_raw(channel_id='C123', markup='', channel_name='ops').formatted_channel == '#ops'
        assert MessagePreview.from_raw(channel_id='C123', markup='').formatted_channel == '#C123'

    def test_computed_fields_serialized(self):
        ts = datetime(2025, 1, 19, 10, 25, 0)
        preview = MessagePreview.from_raw(
            channel_id='C1',
            channel_name='test-channel',
            author_id='U1',
            author_name='test_user',
            markup='*test* message',
            timestamp=ts,
            edited=True,
        )
        data = preview.model_dump()
        assert data['text_preview'] == 'test message'
        assert data['formatted_author'] == 'test_user'
        assert data['formatted_channel'] == '#test-channel'
        assert data['timestamp'] == ts
        assert data['edited'] is True
