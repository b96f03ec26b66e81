"""Tests for the terminal front end."""

from unittest.mock import patch

import pytest
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document as PromptDocument

from chat_composer.catalog import CatalogStorage
from chat_composer.cli import main as cli_main
from chat_composer.cli.completer import EntityCompleter
from chat_composer.cli.interactive import InteractiveConsole


def _complete(completer: EntityCompleter, text: str) -> list:
    document = PromptDocument(text, cursor_position=len(text))
    return list(completer.get_completions(document, CompleteEvent(text_inserted=True)))


class TestEntityCompleter:
    """Tests for the prompt completer."""

    def test_member_completion(self, catalog, engine):
        completions = _complete(EntityCompleter(catalog, engine), 'hi @bo')

        assert [c.text for c in completions] == ['<@U2|Bob> ', '<@U3|Abobby> ']
        assert completions[0].start_position == -3
        assert completions[0].display_text == '@Bob'

    def test_channel_completion(self, catalog, engine):
        completions = _complete(EntityCompleter(catalog, engine), 'see #ran')
        assert [c.text for c in completions] == ['<#C2|random> ']
        assert completions[0].display_meta_text == 'public'

    def test_emoji_completion(self, catalog, engine):
        completions = _complete(EntityCompleter(catalog, engine), ':tad')
        assert [c.text for c in completions] == ['<:tada|🎉> ']

    def test_uses_current_line(self, catalog, engine):
        completions = _complete(EntityCompleter(catalog, engine), 'first @bo\nsecond')
        assert completions == []

    def test_no_trigger(self, catalog, engine):
        assert _complete(EntityCompleter(catalog, engine), 'plain text') == []


class TestInteractiveConsole:
    """Tests for console message handling."""

    @pytest.mark.asyncio
    async def test_send_prints_preview(self, catalog, config):
        console_ui = InteractiveConsole(catalog, config=config)

        with patch('chat_composer.cli.interactive.console') as console:
            sent = await console_ui._send('hi <@U1> *team*')

        assert sent is True
        assert console.print.call_count == 3
        assert console_ui._composer.is_empty()

    @pytest.mark.asyncio
    async def test_preview_shows_author(self, catalog, config):
        console_ui = InteractiveConsole(catalog, config=config, author_id='U2')

        with patch('chat_composer.cli.interactive.console') as console:
            await console_ui._send('ping <#C1>')

        preview_panel = console.print.call_args_list[1].args[0]
        assert preview_panel.title == 'Bob in #local'
        assert preview_panel.subtitle

    @pytest.mark.asyncio
    async def test_preview_without_author(self, catalog, config):
        console_ui = InteractiveConsole(catalog, config=config)

        with patch('chat_composer.cli.interactive.console') as console:
            await console_ui._send('hello')

        assert console.print.call_args_list[1].args[0].title == 'you in #local'

    @pytest.mark.asyncio
    async def test_empty_input_not_sent(self, catalog, config):
        console_ui = InteractiveConsole(catalog, config=config)
        assert await console_ui._send('   ') is False

    def test_commands(self, catalog, config):
        console_ui = InteractiveConsole(catalog, config=config)

        with patch('chat_composer.cli.interactive.console'):
            assert console_ui._handle_command('/help') is True
            assert console_ui._handle_command('/clear') is True
            assert console_ui._handle_command('/bogus') is True
            assert console_ui._handle_command('/quit') is False

    def test_edit_mode_loads_markup(self, catalog, config):
        console_ui = InteractiveConsole(catalog, config=config, edit_markup='old <#C1|general>')
        assert console_ui._composer.edit_mode
        assert console_ui._composer.get_markup_text() == 'old <#C1|general>'


class TestMain:
    """Tests for the command-line entry point."""

    def test_main_loads_catalog_and_runs(self, tmp_path, catalog):
        path = tmp_path / 'catalog.json'
        CatalogStorage(path).save(catalog)

        with patch.object(cli_main, 'run_interactive') as run, patch.object(cli_main.asyncio, 'run') as run_loop:
            cli_main.main(['--catalog', str(path), '--edit', 'hello', '--author', 'U1', '--verbose'])

        run_loop.assert_called_once()
        args, kwargs = run.call_args
        assert args[0] == catalog
        assert kwargs['edit_markup'] == 'hello'
        assert kwargs['author_id'] == 'U1'
