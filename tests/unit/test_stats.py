"""Tests for aggregate result statistics."""

from src.core.schemas import Candidate, ScoreFilter, SkillCount
from src.results.stats import compute_stats


def _candidate(cid: str, score: int, skills: tuple[str, ...] = ()) -> Candidate:
    return Candidate(id=cid, name=f"C{cid}", match_score=score, skills=skills)


class TestComputeStats:
    def test_empty(self) -> None:
        stats = compute_stats([])
        assert stats.total == 0
        assert stats.average_score == 0
        assert stats.top_skills == ()
        assert all(n == 0 for n in stats.bucket_counts.values())

    def test_bucket_counts(self) -> None:
        results = [
            _candidate("1", 95),
            _candidate("2", 90),
            _candidate("3", 85),
            _candidate("4", 75),
            _candidate("5", 40),
        ]
        stats = compute_stats(results)
        assert stats.total == 5
        assert stats.bucket_counts == {
            ScoreFilter.EXCELLENT: 2,
            ScoreFilter.GOOD: 1,
            ScoreFilter.FAIR: 1,
            ScoreFilter.LOW: 1,
        }
        assert (stats.high_match, stats.medium_match, stats.low_match) == (2, 1, 2)

    def test_average_rounds_half_up(self) -> None:
        assert compute_stats([_candidate("1", 80), _candidate("2", 81)]).average_score == 81
        assert compute_stats([_candidate("1", 70), _candidate("2", 71), _candidate("3", 71)]).average_score == 71

    def test_top_skills(self) -> None:
        results = [
            _candidate("1", 90, ("Python", "SQL", "Docker")),
            _candidate("2", 80, ("Python", "Docker")),
            _candidate("3", 70, ("Python", "Go")),
        ]
        stats = compute_stats(results, top_n=2)
        assert stats.top_skills == (
            SkillCount(skill="Python", count=3),
            SkillCount(skill="Docker", count=2),
        )

    def test_skill_ties_keep_first_seen_order(self) -> None:
        results = [_candidate("1", 50, ("Rust",)), _candidate("2", 99, ("Elixir",))]
        stats = compute_stats(results)
        assert [s.skill for s in stats.top_skills] == ["Rust", "Elixir"]

    def test_default_top_five(self) -> None:
        skills = tuple(f"skill-{i}" for i in range(8))
        stats = compute_stats([_candidate("1", 80, skills)])
        assert len(stats.top_skills) == 5
