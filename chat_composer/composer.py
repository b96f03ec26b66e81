"""Edit session for one chat message.

The composer owns the document and caret, feeds every edit to the
suggestion engine and guards submission.

Usage:
    composer = Composer(on_submit=send_message, source=catalog)
    composer.type_text('hi @al')
    composer.handle_key('enter')   # commits the highlighted member
    composer.handle_key('enter')   # sends the message
"""

import logging
import re
from collections.abc import Callable
from enum import Enum

from chat_composer.catalog import CandidateSource, Catalog, CustomEmoji
from chat_composer.config import ComposerConfig, get_config
from chat_composer.document import Document, Emoji, Mark, Position, Text
from chat_composer.markup import parse, serialize
from chat_composer.suggestions import CloseReason, SuggestionEngine, TriggerKind


logger = logging.getLogger(__name__)

HAS_SCHEME = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*:')


class SubmitOutcome(str, Enum):
    """Result of Composer.submit()."""

    SENT = 'sent'
    EMPTY = 'empty'
    TOO_LONG = 'too_long'
    BUSY = 'busy'  # A submission is already in progress
    DISABLED = 'disabled'


class Composer:
    """Binds the document, markup codec and suggestion engine together."""

    def __init__(
        self,
        on_submit: Callable[[str], None],
        *,
        source: CandidateSource | None = None,
        config: ComposerConfig | None = None,
        engine: SuggestionEngine | None = None,
        edit_mode: bool = False,
        initial_markup: str | None = None,
        on_escape: Callable[[], None] | None = None,
    ):
        """Initialize the composer.

        Args:
            on_submit: Send callback; receives the trimmed markup.
            source: Catalog queried for suggestions. Defaults to an empty catalog.
            config: Length limit and suggestion limits.
            engine: Suggestion engine to drive; one is created when omitted.
            edit_mode: Editing an existing message; the document survives submit.
            initial_markup: Markup to load, e.g. the message being edited.
            on_escape: Called when Escape is pressed with no suggestion open.
        """
        self._on_submit = on_submit
        self._on_escape = on_escape
        self._config = config or get_config()
        self.source: CandidateSource = source if source is not None else Catalog()
        self.engine = engine or SuggestionEngine(config=self._config)
        self.edit_mode = edit_mode
        self.disabled = False
        self.pending = False
        self._submitting = False

        self.document = Document()
        self.caret = Position(0, 0)
        if initial_markup:
            self.set_markup_text(initial_markup)

    def get_markup_text(self) -> str:
        """Markup of the document with surrounding whitespace trimmed.

        Trimming happens on the document, so the result parses back to
        ``document.trimmed()``.
        """
        return serialize(self.document.trimmed())

    def set_markup_text(self, text: str) -> None:
        """Replace the document with parsed markup; the caret moves to the end."""
        self.engine.cancel(CloseReason.CARET_MOVED)
        self.document = parse(text)
        self.caret = self.document.end_position()
        self._refresh()

    def is_empty(self) -> bool:
        return self.document.is_blank()

    def content_length(self) -> int:
        """Length of the markup submit() would send, in code points."""
        return len(self.get_markup_text())

    def clear(self) -> None:
        self.engine.cancel(CloseReason.CARET_MOVED)
        self.caret = self.document.clear()
        self._refresh()

    def type_text(self, text: str) -> Position:
        """Insert typed text at the caret and re-run suggestions."""
        self.caret = self.document.insert_text(self.caret, text)
        self._refresh()
        return self.caret

    def move_caret(self, position: Position) -> None:
        """Place the caret.

        Raises:
            InvalidPositionError: If the position does not address the document.
        """
        self.document.text_before(position)
        self.caret = position
        self._refresh()

    def insert_entity_trigger(self, kind: TriggerKind | str) -> Position:
        """Insert a bare trigger character so the user can type the query."""
        return self.type_text(TriggerKind(kind).value)

    def insert_link(self, label: str, href: str) -> Position:
        """Insert a link run at the caret.

        Args:
            label: Visible text; the target itself is used when empty.
            href: Link target; ``https://`` is prepended when it has no scheme.
        """
        href = href.strip()
        if not HAS_SCHEME.match(href) and not href.startswith('/'):
            href = f'https://{href}'
        run = Text(text=label or href, marks=frozenset({Mark.LINK}), href=href)
        self.caret = self.document.insert_nodes(self.caret, [run])
        self._refresh()
        return self.caret

    def insert_emoji(self, entry: CustomEmoji) -> Position:
        """Insert an emoji picked outside the suggestion popup."""
        node = Emoji(shortcode=entry.shortcode, unicode=entry.unicode, image_url=entry.image_url)
        self.caret = self.document.insert_nodes(self.caret, [node])
        self._refresh()
        return self.caret

    def handle_key(self, key: str, shift: bool = False) -> bool:
        """Apply one of the editing keys.

        Args:
            key: 'enter', 'tab', 'escape', 'up' or 'down'.
            shift: Whether Shift is held.

        Returns:
            True if the key was consumed.
        """
        key = key.lower()
        engine = self.engine

        if key in ('enter', 'tab') and engine.is_open:
            caret = engine.commit(self.document)
            if caret is None:
                return key == 'enter' and self._enter(shift)
            self.caret = caret
            self._refresh()
            return True

        if key == 'enter':
            return self._enter(shift)

        if key in ('up', 'down'):
            if not engine.is_open:
                return False
            engine.move_selection(-1 if key == 'up' else 1)
            return True

        if key == 'escape':
            if engine.cancel():
                return True
            if self._on_escape is not None:
                self._on_escape()
                return True
            return False

        return False

    def _enter(self, shift: bool) -> bool:
        if shift:
            self.caret = self.document.split_block(self.caret)
            self._refresh()
            return True
        self.submit()
        return True

    def submit(self) -> SubmitOutcome:
        """Hand the markup to the send callback if it may be sent.

        Returns:
            SENT when the callback ran, otherwise the reason it did not.

        Raises:
            Whatever the send callback raises; the document is kept.
        """
        if self.disabled or self.pending:
            return SubmitOutcome.DISABLED
        if self._submitting:
            logger.debug('Submit ignored: already submitting')
            return SubmitOutcome.BUSY
        if self.is_empty():
            return SubmitOutcome.EMPTY

        markup = self.get_markup_text()
        if not markup:
            return SubmitOutcome.EMPTY
        if len(markup) > self._config.max_message_length:
            logger.info(f'Submit refused: {len(markup)} chars exceeds {self._config.max_message_length}')
            return SubmitOutcome.TOO_LONG

        self._submitting = True
        try:
            self._on_submit(markup)
        finally:
            self._submitting = False

        if not self.edit_mode:
            self.clear()
        return SubmitOutcome.SENT

    def _refresh(self) -> None:
        self.engine.update(self.document, self.caret, self.source)
