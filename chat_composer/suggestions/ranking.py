"""Ordering policy for suggestion candidates."""

from collections.abc import Callable, Iterable
from dataclasses import replace

from chat_composer.fuzzy import FuzzyMatch, fuzzy_match
from chat_composer.suggestions.models import Candidate


def rank_candidates(
    query: str,
    candidates: Iterable[Candidate],
    limit: int | None = None,
    ranker: Callable[[str, str], FuzzyMatch] = fuzzy_match,
) -> list[Candidate]:
    """Filter candidates through the fuzzy ranker and order them.

    Order: non-special before special mentions, then labels starting with
    the query before the rest, then ascending case-insensitive label.

    Args:
        query: Text typed after the trigger.
        candidates: Full candidate set.
        limit: Maximum number of results, None for all.
        ranker: Match function; the shared fuzzy matcher by default.

    Returns:
        Matching candidates with scores filled in.
    """
    lower_query = query.lower()
    matched: list[Candidate] = []
    for candidate in candidates:
        result = ranker(query, candidate.label)
        if result.matches:
            matched.append(replace(candidate, score=result.score))

    matched.sort(
        key=lambda c: (
            c.special,
            not c.label.lower().startswith(lower_query),
            c.label.lower(),
            c.label,
        )
    )
    if limit is not None:
        return matched[:limit]
    return matched
