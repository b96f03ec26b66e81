"""prompt_toolkit completer backed by the suggestion engine."""

import logging
from collections.abc import Iterable

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document as PromptDocument

from chat_composer.catalog import CandidateSource
from chat_composer.document import Document, Position
from chat_composer.markup import serialize_inline
from chat_composer.suggestions import SuggestionEngine


logger = logging.getLogger(__name__)


class EntityCompleter(Completer):
    """Offers members, channels and emoji while typing in the prompt.

    The prompt buffer holds markup text, so a completion replaces the
    trigger and query with the entity's markup token plus a space.
    """

    def __init__(self, source: CandidateSource, engine: SuggestionEngine | None = None):
        """Initialize the completer.

        Args:
            source: Catalog queried for candidates.
            engine: Engine to run; a private one is created when omitted.
        """
        self.source = source
        self.engine = engine or SuggestionEngine()

    def get_completions(self, document: PromptDocument, complete_event: CompleteEvent) -> Iterable[Completion]:
        line = document.current_line_before_cursor
        scratch = Document()
        caret = scratch.insert_text(Position(0, 0), line)

        session = self.engine.update(scratch, caret, self.source)
        if session is None:
            return

        replaced = len(session.query) + 1
        for candidate in session.candidates:
            yield Completion(
                serialize_inline([candidate.node]) + ' ',
                start_position=-replaced,
                display=f'{session.trigger.value}{candidate.label}',
                display_meta=candidate.detail,
            )
