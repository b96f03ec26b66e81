"""Shared pytest fixtures for chat composer tests."""

from unittest.mock import MagicMock

import pytest

from chat_composer.catalog import Catalog, Channel, ChannelKind, CustomEmoji, Member
from chat_composer.composer import Composer
from chat_composer.config import ComposerConfig
from chat_composer.suggestions import SuggestionEngine, SuggestionListener


@pytest.fixture
def config():
    """Configuration isolated from the environment and any .env file."""
    return ComposerConfig(_env_file=None)


@pytest.fixture
def catalog():
    """Small workspace catalog."""
    return Catalog(
        members=[
            Member(id='U1', display_name='alice'),
            Member(id='U2', display_name='Bob'),
            Member(id='U3', display_name='Abobby'),
            Member(id='U4', display_name='carol.smith'),
        ],
        channels=[
            Channel(id='C1', name='general'),
            Channel(id='C2', name='random'),
            Channel(id='C3', name='gen-secret', kind=ChannelKind.PRIVATE),
            Channel(id='D1', name='alice', kind=ChannelKind.DM),
            Channel(id='G1', name='general-chat', kind=ChannelKind.GROUP_DM),
        ],
        custom_emoji=[
            CustomEmoji(shortcode='partyparrot', image_url='https://emoji.example.com/parrot.gif'),
            CustomEmoji(shortcode='tada', image_url='https://emoji.example.com/tada.png'),
        ],
    )


@pytest.fixture
def listener():
    """Listener mock recording session events."""
    return MagicMock(spec=SuggestionListener)


@pytest.fixture
def engine(config, listener):
    """Suggestion engine wired to the recording listener."""
    return SuggestionEngine(listener=listener, config=config)


@pytest.fixture
def sent():
    """Messages handed to the send callback."""
    return []


@pytest.fixture
def composer(sent, catalog, config, engine):
    """Composer sending into the ``sent`` list."""
    return Composer(sent.append, source=catalog, config=config, engine=engine)
