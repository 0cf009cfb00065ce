"""Aggregate statistics over the full active result set."""

import math
from collections import Counter
from collections.abc import Sequence

from src.core.schemas import Candidate, QueryState, ResultStats, ScoreFilter, SkillCount
from src.results.query import view

_BUCKETS = (ScoreFilter.EXCELLENT, ScoreFilter.GOOD, ScoreFilter.FAIR, ScoreFilter.LOW)


def compute_stats(results: Sequence[Candidate], top_n: int = 5) -> ResultStats:
    """Summarize ``results``, ignoring whatever filter the user has applied.

    Average score is rounded half-up. Top skills are the ``top_n`` most
    frequent, ties kept in first-seen order.
    """
    everything = view(results, query=QueryState())
    total = len(everything)
    if total == 0:
        return ResultStats(bucket_counts={b: 0 for b in _BUCKETS})

    bucket_counts = {b: sum(1 for c in everything if b.contains(c.match_score)) for b in _BUCKETS}
    average = math.floor(sum(c.match_score for c in everything) / total + 0.5)

    skill_counts: Counter[str] = Counter()
    for c in results:
        skill_counts.update(c.skills)

    return ResultStats(
        total=total,
        bucket_counts=bucket_counts,
        high_match=bucket_counts[ScoreFilter.EXCELLENT],
        medium_match=bucket_counts[ScoreFilter.GOOD],
        low_match=total - bucket_counts[ScoreFilter.EXCELLENT] - bucket_counts[ScoreFilter.GOOD],
        average_score=average,
        top_skills=tuple(SkillCount(skill=s, count=n) for s, n in skill_counts.most_common(top_n)),
    )
