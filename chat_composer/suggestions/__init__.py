"""Trigger-driven suggestions for mentions, channels and emoji."""

from chat_composer.suggestions.builtin import BUILTIN_EMOJI, SPECIAL_MENTIONS, SpecialMentionOption
from chat_composer.suggestions.engine import SuggestionEngine, find_trigger
from chat_composer.suggestions.models import (
    Candidate,
    CloseReason,
    SuggestionListener,
    SuggestionSession,
    TriggerKind,
)
from chat_composer.suggestions.ranking import rank_candidates


__all__ = [
    'BUILTIN_EMOJI',
    'SPECIAL_MENTIONS',
    'Candidate',
    'CloseReason',
    'SpecialMentionOption',
    'SuggestionEngine',
    'SuggestionListener',
    'SuggestionSession',
    'TriggerKind',
    'find_trigger',
    'rank_candidates',
]
