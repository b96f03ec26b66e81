"""Trigger-driven suggestion engine.

Watches the text left of the caret for ``@``, ``#`` and ``:`` triggers,
ranks candidates from the catalogs passed with each update, and splices the
chosen entity into the document on commit.

Usage:
    engine = SuggestionEngine(listener=popup)
    engine.update(document, caret, catalog)   # after every keystroke
    caret = engine.commit(document)           # on Enter/Tab
"""

import inspect
import logging
import re
from collections.abc import Iterable, Sequence

from chat_composer.catalog.models import CandidateSource, CustomEmoji
from chat_composer.config import ComposerConfig, get_config
from chat_composer.document import (
    OBJECT_REPLACEMENT,
    ChannelMention,
    CodeBlock,
    Document,
    Emoji,
    InvalidPositionError,
    Position,
    SpecialMention,
    Text,
    UserMention,
)
from chat_composer.suggestions.builtin import BUILTIN_EMOJI, SPECIAL_MENTIONS, SpecialMentionOption
from chat_composer.suggestions.models import (
    Candidate,
    CloseReason,
    SuggestionListener,
    SuggestionSession,
    TriggerKind,
)
from chat_composer.suggestions.ranking import rank_candidates


logger = logging.getLogger(__name__)

WORD_CHAR = re.compile(r'\w')
TRIGGERS = frozenset(kind.value for kind in TriggerKind)


def find_trigger(text: str) -> int | None:
    """Offset of the trigger that starts the word ending at the caret.

    ``text`` is everything left of the caret. The trigger must sit at the
    start of the text or after a non-word character, with no whitespace or
    entity between it and the caret.
    """
    for index in range(len(text) - 1, -1, -1):
        char = text[index]
        if char.isspace() or char == OBJECT_REPLACEMENT:
            return None
        if char in TRIGGERS:
            if index == 0 or not WORD_CHAR.match(text[index - 1]):
                return index
            return None
    return None


class SuggestionEngine:
    """One suggestion session at a time for a single editor."""

    def __init__(
        self,
        *,
        special_mentions: Sequence[SpecialMentionOption] = SPECIAL_MENTIONS,
        builtin_emoji: Sequence[CustomEmoji] = BUILTIN_EMOJI,
        listener: SuggestionListener | None = None,
        config: ComposerConfig | None = None,
    ):
        """Initialize the engine.

        Args:
            special_mentions: Group mentions offered after members.
            builtin_emoji: Standard emoji merged with custom emoji.
            listener: Receiver of session events.
            config: Limits for candidate lists; defaults to get_config().
        """
        self._special_mentions = tuple(special_mentions)
        self._builtin_emoji = tuple(builtin_emoji)
        self._listener = listener or SuggestionListener()
        self._config = config or get_config()
        self._session: SuggestionSession | None = None
        self._dismissed: Position | None = None
        self._generation = 0

    @property
    def session(self) -> SuggestionSession | None:
        return self._session

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def update(self, document: Document, caret: Position, source: CandidateSource) -> SuggestionSession | None:
        """Re-evaluate the session after an edit or caret move.

        Args:
            document: Current document.
            caret: Current caret position.
            source: Catalog snapshot for this query; must answer synchronously.

        Returns:
            The open session, or None when idle.
        """
        session = self._track(document, caret)
        self._generation += 1
        if session is None:
            return None

        try:
            entries = self._request(session.trigger, source)
            if inspect.isawaitable(entries):
                if inspect.iscoroutine(entries):
                    entries.close()
                raise TypeError('Asynchronous candidate source used with update(); use update_async()')
            candidates = self._build(session.trigger, entries)
        except Exception as e:
            logger.warning(f'Candidate source failed for {session.trigger.value!r} query: {e}')
            candidates = self._build(session.trigger, [])

        self._publish(session, candidates)
        return session

    async def update_async(
        self, document: Document, caret: Position, source: CandidateSource
    ) -> SuggestionSession | None:
        """Like update(), but the source may return awaitables.

        When a newer update starts before this one's candidates arrive, the
        late result is discarded (last query wins).
        """
        session = self._track(document, caret)
        self._generation += 1
        generation = self._generation
        if session is None:
            return None

        query = session.query
        try:
            entries = self._request(session.trigger, source)
            if inspect.isawaitable(entries):
                entries = await entries
            candidates = self._build(session.trigger, entries)
        except Exception as e:
            logger.warning(f'Candidate source failed for {session.trigger.value!r} query: {e}')
            candidates = self._build(session.trigger, [])

        if generation != self._generation or self._session is not session:
            logger.debug(f'Discarding stale candidates for query {query!r}')
            return self._session

        self._publish(session, candidates)
        return session

    def cancel(self, reason: CloseReason = CloseReason.ESCAPE) -> bool:
        """Close the open session without touching the document.

        Returns:
            True if a session was open.
        """
        if self._session is None:
            return False
        self._close(reason)
        return True

    def move_selection(self, delta: int) -> Candidate | None:
        """Move the highlighted candidate, wrapping around the list."""
        session = self._session
        if session is None or not session.candidates:
            return None
        session.selected = (session.selected + delta) % len(session.candidates)
        return session.selected_candidate

    def commit(self, document: Document, index: int | None = None) -> Position | None:
        """Replace the trigger and query with the chosen entity.

        Args:
            document: Document the session was opened on.
            index: Candidate to insert; defaults to the highlighted one.

        Returns:
            Caret after the entity and its trailing space, or None when no
            session or candidate is available.
        """
        session = self._session
        if session is None or not session.candidates:
            return None
        if index is None:
            index = session.selected
        if not 0 <= index < len(session.candidates):
            raise IndexError(f'No candidate at index {index}')

        candidate = session.candidates[index]
        caret = document.delete_range(session.position, session.caret)
        caret = document.insert_nodes(caret, [candidate.node, Text(text=' ')])
        logger.debug(f'Committed {session.trigger.value}{candidate.label}')
        self._close(CloseReason.COMMITTED)
        return caret

    def _track(self, document: Document, caret: Position) -> SuggestionSession | None:
        """Advance the state machine for the current caret."""
        try:
            block = document.textblock(caret.block)
            before = None if isinstance(block, CodeBlock) else document.text_before(caret)
        except InvalidPositionError:
            before = None

        if before is None:
            self._dismissed = None
            self._close(CloseReason.CARET_MOVED)
            return None

        start = find_trigger(before)
        candidate_position = Position(caret.block, start) if start is not None else None
        if self._dismissed is not None and self._dismissed != candidate_position:
            self._dismissed = None

        session = self._session
        if session is not None:
            reason = self._invalidation(session, caret, before)
            if reason is None and candidate_position not in (None, session.position):
                reason = CloseReason.SUPERSEDED
            if reason is None:
                session.caret = caret
                session.query = before[session.position.offset + 1 :]
                return session
            self._close(reason)

        if candidate_position is None or candidate_position == self._dismissed:
            return None
        return self._open(TriggerKind(before[start]), candidate_position, caret, before[start + 1 :])

    @staticmethod
    def _invalidation(session: SuggestionSession, caret: Position, before: str) -> CloseReason | None:
        """Reason the open session can no longer continue, if any."""
        offset = session.position.offset
        if caret.block != session.position.block or caret.offset <= offset:
            return CloseReason.CARET_MOVED
        if before[offset] != session.trigger.value:
            return CloseReason.TRIGGER_REMOVED
        query = before[offset + 1 :]
        if OBJECT_REPLACEMENT in query:
            return CloseReason.CARET_MOVED
        if any(char.isspace() for char in query):
            return CloseReason.WHITESPACE
        return None

    def _open(self, trigger: TriggerKind, position: Position, caret: Position, query: str) -> SuggestionSession:
        self._session = SuggestionSession(trigger=trigger, position=position, caret=caret, query=query)
        logger.debug(f'Opened {trigger.value} session at {position}')
        self._listener.session_opened(trigger, position)
        return self._session

    def _close(self, reason: CloseReason) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        if reason is CloseReason.ESCAPE:
            self._dismissed = session.position
        logger.debug(f'Closed {session.trigger.value} session: {reason.value}')
        self._listener.session_closed(reason)

    def _request(self, trigger: TriggerKind, source: CandidateSource):
        if trigger is TriggerKind.MENTION:
            return source.members()
        if trigger is TriggerKind.CHANNEL:
            return source.channels()
        return source.custom_emoji()

    def _build(self, trigger: TriggerKind, entries: Iterable) -> list[Candidate]:
        """Turn catalog entries into candidates, adding built-in ones."""
        if trigger is TriggerKind.MENTION:
            candidates = [
                Candidate(
                    label=member.display_name,
                    node=UserMention(user_id=member.id, display_name=member.display_name),
                )
                for member in entries
            ]
            candidates.extend(
                Candidate(
                    label=option.label,
                    node=SpecialMention(kind=option.kind),
                    special=True,
                    detail=option.description,
                )
                for option in self._special_mentions
            )
            return candidates

        if trigger is TriggerKind.CHANNEL:
            return [
                Candidate(
                    label=channel.name,
                    node=ChannelMention(channel_id=channel.id, name=channel.name),
                    detail=channel.kind.value,
                )
                for channel in entries
                if not channel.is_conversation
            ]

        candidates = []
        seen: set[str] = set()
        for emoji in (*self._builtin_emoji, *entries):
            if emoji.shortcode in seen:
                continue
            seen.add(emoji.shortcode)
            candidates.append(
                Candidate(
                    label=emoji.shortcode,
                    node=Emoji(shortcode=emoji.shortcode, unicode=emoji.unicode, image_url=emoji.image_url),
                    detail=emoji.unicode or '',
                )
            )
        return candidates

    def _limit(self, trigger: TriggerKind) -> int:
        if trigger is TriggerKind.MENTION:
            return self._config.mention_suggestion_limit
        if trigger is TriggerKind.CHANNEL:
            return self._config.channel_suggestion_limit
        return self._config.emoji_suggestion_limit

    def _publish(self, session: SuggestionSession, candidates: list[Candidate]) -> None:
        session.candidates = rank_candidates(session.query, candidates, limit=self._limit(session.trigger))
        session.selected = 0
        self._listener.candidates_updated(session.candidates)
