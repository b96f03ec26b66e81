"""Lightweight sequential-character fuzzy matcher.

Shared by the suggestion engine and by any search or navigation UI that needs
to rank labels against typed input. Scores favour contiguous matches, matches
at the start of the label and matches at word boundaries.
"""

import re
from dataclasses import dataclass


NON_WORD = re.compile(r'\W')

SUBSTRING_BASE = 200
PREFIX_BONUS = 100
WORD_BOUNDARY_BONUS = 50
SEQUENCE_WORD_START_BONUS = 10
# Scattered matches never reach the contiguous tier
SEQUENCE_MAX_SCORE = SUBSTRING_BASE - 1


@dataclass(frozen=True)
class FuzzyMatch:
    """Result of matching a query against a candidate label."""

    matches: bool
    score: int

    def __bool__(self) -> bool:
        return self.matches


NO_MATCH = FuzzyMatch(matches=False, score=0)


def _starts_word(text: str, index: int) -> bool:
    return index == 0 or bool(NON_WORD.match(text[index - 1]))


def fuzzy_match(query: str, text: str) -> FuzzyMatch:
    """Score how well ``query`` matches ``text``.

    A contiguous (case-insensitive) substring scores 200, plus 100 when it
    starts the text, plus 50 when it follows a non-word character, plus the
    query length. Otherwise the query characters are consumed in order; each
    matched character adds twice the current run of consecutive matches and
    10 more when it starts a word.

    Args:
        query: Text typed by the user.
        text: Candidate label.

    Returns:
        FuzzyMatch with ``matches=False, score=0`` when the query cannot be
        consumed in order.
    """
    lower_query = query.lower()
    lower_text = text.lower()

    if len(lower_query) > len(lower_text):
        return NO_MATCH

    index = lower_text.find(lower_query)
    if index != -1:
        prefix_bonus = PREFIX_BONUS if index == 0 else 0
        word_bonus = WORD_BOUNDARY_BONUS if index > 0 and _starts_word(lower_text, index) else 0
        return FuzzyMatch(matches=True, score=SUBSTRING_BASE + prefix_bonus + word_bonus + len(lower_query))

    qi = 0
    score = 0
    consecutive = 0
    for ti, char in enumerate(lower_text):
        if qi == len(lower_query):
            break
        if char == lower_query[qi]:
            qi += 1
            consecutive += 1
            score += consecutive * 2
            if _starts_word(lower_text, ti):
                score += SEQUENCE_WORD_START_BONUS
        else:
            consecutive = 0

    if qi < len(lower_query):
        return NO_MATCH

    return FuzzyMatch(matches=True, score=min(score, SEQUENCE_MAX_SCORE))
