"""Query engine: derives the filtered, sorted results view.

Filter order:
  1. ShortlistFilter    : only when QueryState.shortlisted_only is set
  2. SearchTextFilter   : name OR email OR any skill, case-insensitive substring
  3. ScoreBucketFilter  : ScoreFilter bucket membership
Sorting always runs after filtering and is stable.

Everything here is pure: nothing mutates the store or keeps state between calls.
"""

import logging
import unicodedata
from collections.abc import Callable, Collection, Sequence

from src.core.schemas import Candidate, QueryState, ScoreFilter, SortKey

logger = logging.getLogger(__name__)

# A filter is a callable that takes candidates and returns a subset.
Filter = Callable[[list[Candidate]], list[Candidate]]


class SearchTextFilter:
    """Keep candidates whose name, email, or any skill contains the search text."""

    def __init__(self, search_text: str) -> None:
        self._needle = search_text.strip().casefold()

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._needle:
            return candidates
        result = [c for c in candidates if self._matches(c)]
        removed = len(candidates) - len(result)
        if removed:
            logger.debug("SearchTextFilter: removed %d candidates", removed)
        return result

    def _matches(self, candidate: Candidate) -> bool:
        needle = self._needle
        return (
            needle in candidate.name.casefold()
            or needle in candidate.email.casefold()
            or any(needle in skill.casefold() for skill in candidate.skills)
        )


class ScoreBucketFilter:
    """Keep candidates whose match score falls in the selected bucket."""

    def __init__(self, bucket: ScoreFilter) -> None:
        self._bucket = bucket

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        if self._bucket is ScoreFilter.ALL:
            return candidates
        return [c for c in candidates if self._bucket.contains(c.match_score)]


class ShortlistFilter:
    """Keep only shortlisted candidates."""

    def __init__(self, shortlist: Collection[str]) -> None:
        self._ids = set(shortlist)

    def __call__(self, candidates: list[Candidate]) -> list[Candidate]:
        return [c for c in candidates if c.id in self._ids]


def name_sort_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive ordering, ties broken by the raw name."""
    folded = unicodedata.normalize("NFKD", name)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return (folded.casefold(), name)


def sort_candidates(candidates: list[Candidate], sort_key: SortKey) -> list[Candidate]:
    """Return a new list ordered by ``sort_key``. Ties keep their input order."""
    if sort_key is SortKey.NAME:
        return sorted(candidates, key=lambda c: name_sort_key(c.name))
    if sort_key is SortKey.EXPERIENCE:
        return sorted(candidates, key=lambda c: c.experience_years, reverse=True)
    return sorted(candidates, key=lambda c: c.match_score, reverse=True)


def build_filters(query: QueryState, shortlist: Collection[str] = ()) -> list[Filter]:
    filters: list[Filter] = []
    if query.shortlisted_only:
        filters.append(ShortlistFilter(shortlist))
    filters.append(SearchTextFilter(query.search_text))
    filters.append(ScoreBucketFilter(query.score_filter))
    return filters


def run_filter_chain(candidates: list[Candidate], filters: list[Filter]) -> list[Candidate]:
    """Apply filters in order, returning the surviving candidates."""
    result = candidates
    for f in filters:
        result = f(result)
    return result


def view(
    results: Sequence[Candidate],
    shortlist: Collection[str] = (),
    query: QueryState | None = None,
) -> list[Candidate]:
    """Filter then sort ``results`` for display.

    Args:
        results: The active result set; not modified.
        shortlist: Shortlisted candidate ids, used when ``query.shortlisted_only``.
        query: Search text, score bucket and sort key. Defaults to everything by score.
    """
    query = query or QueryState()
    filtered = run_filter_chain(list(results), build_filters(query, shortlist))
    return sort_candidates(filtered, query.sort_key)
