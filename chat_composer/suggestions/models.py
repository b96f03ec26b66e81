"""Suggestion session state and events."""

from dataclasses import dataclass, field
from enum import Enum

from chat_composer.document import Position


class TriggerKind(str, Enum):
    """Characters that open a suggestion session."""

    MENTION = '@'
    CHANNEL = '#'
    EMOJI = ':'


class CloseReason(str, Enum):
    """Why a suggestion session ended."""

    COMMITTED = 'committed'
    ESCAPE = 'escape'  # User dismissed the popup
    CARET_MOVED = 'caret_moved'  # Caret left the trigger range
    WHITESPACE = 'whitespace'  # Whitespace right after the trigger
    TRIGGER_REMOVED = 'trigger_removed'
    SUPERSEDED = 'superseded'  # Another trigger was typed


@dataclass(frozen=True)
class Candidate:
    """One entry of the suggestion list.

    Attributes:
        label: Text matched against the query and shown to the user.
        node: Entity node inserted when the candidate is committed.
        special: True for built-in group mentions, which sort last.
        detail: Secondary text (description, channel kind).
        score: Fuzzy score against the current query.
    """

    label: str
    node: object
    special: bool = False
    detail: str = ''
    score: int = 0


@dataclass
class SuggestionSession:
    """The open session between a trigger and the caret."""

    trigger: TriggerKind
    position: Position  # Where the trigger character sits
    caret: Position
    query: str = ''
    candidates: list[Candidate] = field(default_factory=list)
    selected: int = 0

    @property
    def selected_candidate(self) -> Candidate | None:
        if not self.candidates:
            return None
        return self.candidates[self.selected]


class SuggestionListener:
    """Receives session events; override the callbacks you need."""

    def session_opened(self, trigger: TriggerKind, position: Position) -> None:
        """Called when a trigger opens a session."""

    def candidates_updated(self, candidates: list[Candidate]) -> None:
        """Called with the ranked list after every query."""

    def session_closed(self, reason: CloseReason) -> None:
        """Called once when the session ends."""
