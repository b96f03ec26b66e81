"""Interactive terminal composer."""

import logging
from datetime import datetime

from prompt_toolkit import PromptSession
from prompt_toolkit.key_binding import KeyBindings
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text as RichText

from chat_composer.catalog import CandidateSource
from chat_composer.cli.completer import EntityCompleter
from chat_composer.composer import Composer, SubmitOutcome
from chat_composer.config import ComposerConfig, get_config
from chat_composer.formatting import CollectedEntities, EntityResolver, MessagePreview, collect_entities
from chat_composer.suggestions import SuggestionEngine


logger = logging.getLogger(__name__)

console = Console()

LOCAL_CHANNEL = 'local'
LOCAL_AUTHOR = 'you'


def _create_key_bindings() -> KeyBindings:
    """Create key bindings for the prompt.

    Returns:
        KeyBindings with Ctrl+J for newline support.
    """
    bindings = KeyBindings()

    @bindings.add('c-j')
    def _(event):
        """Insert newline on Ctrl+J."""
        event.current_buffer.insert_text('\n')

    return bindings


class InteractiveConsole:
    """Terminal front end that composes and "sends" messages locally."""

    def __init__(
        self,
        source: CandidateSource,
        config: ComposerConfig | None = None,
        edit_markup: str | None = None,
        author_id: str | None = None,
    ):
        """Initialize the interactive console.

        Args:
            source: Catalog used for suggestions and name resolution.
            config: Composer settings.
            edit_markup: Markup of a message to edit; the console exits after
                the edited message is sent.
            author_id: Member id shown as the author of sent messages.
        """
        self._config = config or get_config()
        self._author_id = author_id
        self._resolver = EntityResolver(source)
        self._outbox: list[str] = []
        self._composer = Composer(
            self._outbox.append,
            source=source,
            config=self._config,
            edit_mode=edit_markup is not None,
            initial_markup=edit_markup,
        )
        self._completer = EntityCompleter(source, SuggestionEngine(config=self._config))
        self._running = False
        self._session: PromptSession | None = None

    async def _print_sent(self, markup: str) -> None:
        """Print the sent markup and its rendered preview.

        Args:
            markup: Markup handed to the send callback.
        """
        entities = collect_entities(markup)
        if self._author_id:
            entities.merge(CollectedEntities(user_ids=[self._author_id]))
        context = await self._resolver.resolve(entities)
        preview = MessagePreview.from_raw(
            channel_id=LOCAL_CHANNEL,
            channel_name=LOCAL_CHANNEL,
            author_id=self._author_id,
            author_name=None if self._author_id else LOCAL_AUTHOR,
            markup=markup,
            timestamp=datetime.now(),
            edited=self._composer.edit_mode,
            context=context,
        )

        edited = ' (edited)' if preview.edited else ''
        console.print(Panel(RichText(markup), title='Markup', border_style='blue', padding=(0, 1)))
        console.print(
            Panel(
                RichText(preview.text_preview),
                title=f'{preview.formatted_author} in {preview.formatted_channel}{edited}',
                subtitle=preview.timestamp.strftime('%H:%M:%S'),
                border_style='green',
                padding=(0, 1),
            )
        )
        console.print(f'[dim]({len(markup)} / {self._config.max_message_length} characters)[/dim]')

    def _print_help(self) -> None:
        """Print help message."""
        help_text = """**Available Commands:**

- `/quit` or `/exit` - Exit the composer
- `/clear` - Discard the current draft
- `/help` - Show this help message

**Input:**
- `Enter` - Send message
- `Ctrl+J` - Insert newline (for multi-line messages)
- `@`, `#`, `:` - Suggest members, channels and emoji

**Markup:**
- `*bold*`, `_italic_`, `~strike~`, `` `code` ``
- `<https://example.com|label>` for links
- `- item`, `1. item`, `> quote`, and ``` fences for code blocks
"""
        md = Markdown(help_text)
        console.print(Panel(md, title='Help', border_style='green'))

    def _handle_command(self, command: str) -> bool:
        """Handle a slash command.

        Args:
            command: The command (including slash).

        Returns:
            True to continue, False to exit.
        """
        cmd = command.lower().strip()

        if cmd in ('/quit', '/exit', '/q'):
            console.print('[yellow]Goodbye![/yellow]')
            return False

        elif cmd in ('/clear', '/c'):
            self._composer.clear()
            console.print('[green]Draft cleared.[/green]')

        elif cmd in ('/help', '/h', '/?'):
            self._print_help()

        else:
            console.print(f'[red]Unknown command: {command}[/red]')
            console.print('[dim]Type /help for available commands.[/dim]')

        return True

    async def _send(self, user_input: str) -> bool:
        """Submit one prompt entry.

        Returns:
            True if the message was sent.
        """
        self._composer.set_markup_text(user_input)
        outcome = self._composer.submit()

        if outcome is SubmitOutcome.EMPTY:
            return False
        if outcome is SubmitOutcome.TOO_LONG:
            console.print(
                f'[red]Message too long: {self._composer.content_length()} characters '
                f'(max {self._config.max_message_length})[/red]'
            )
            return False
        if outcome is not SubmitOutcome.SENT:
            console.print(f'[red]Message not sent: {outcome.value}[/red]')
            return False

        await self._print_sent(self._outbox.pop())
        return True

    async def run(self) -> None:
        """Run the interactive console loop."""
        self._running = True
        self._session = PromptSession(
            completer=self._completer,
            complete_while_typing=True,
            key_bindings=_create_key_bindings(),
            multiline=False,  # Enter submits, Ctrl+J adds newline
        )
        editing = self._composer.edit_mode

        console.print()
        console.print(
            Panel.fit(
                '[bold blue]Chat Composer[/bold blue]\n'
                'Type [green]/help[/green] for commands, [green]@ # :[/green] for suggestions.',
                border_style='blue',
            )
        )
        console.print()

        while self._running:
            try:
                default = self._composer.get_markup_text() if editing else ''
                user_input = await self._session.prompt_async('Edit: ' if editing else 'Message: ', default=default)

                if user_input.startswith('/'):
                    should_continue = self._handle_command(user_input)
                    if not should_continue:
                        break
                    continue

                try:
                    sent = await self._send(user_input)
                except Exception as e:
                    logger.exception('Error sending message')
                    console.print(f'[red]Error: {e}[/red]')
                    continue

                if sent and editing:
                    break

            except KeyboardInterrupt:
                console.print('\n[yellow]Use /quit to exit[/yellow]')
            except EOFError:
                console.print('\n[yellow]Goodbye![/yellow]')
                break

        self._running = False


async def run_interactive(
    source: CandidateSource,
    config: ComposerConfig | None = None,
    edit_markup: str | None = None,
    author_id: str | None = None,
) -> None:
    """Run the interactive console.

    Args:
        source: Catalog used for suggestions and name resolution.
        config: Composer settings.
        edit_markup: Markup of a message to edit instead of composing a new one.
        author_id: Member id shown as the author of sent messages.
    """
    console_ui = InteractiveConsole(source, config=config, edit_markup=edit_markup, author_id=author_id)
    await console_ui.run()
