"""Tests for ResultStore: result replacement, active job id, shortlist toggling."""

import pytest

from src.core.errors import UnknownCandidateError
from src.core.schemas import Candidate, ShortlistChange
from src.results.store import ResultStore


def _candidate(cid: str, score: int = 80) -> Candidate:
    return Candidate(id=cid, name=f"Candidate {cid}", match_score=score)


@pytest.fixture
def store() -> ResultStore:
    s = ResultStore()
    s.activate("job-1")
    s.set_results([_candidate("a"), _candidate("b"), _candidate("c")], job_id="job-1")
    return s


class TestResults:
    def test_starts_empty(self) -> None:
        s = ResultStore()
        assert s.results == ()
        assert s.active_job_id is None
        assert s.results_job_id is None

    def test_set_results_for_active_job(self, store: ResultStore) -> None:
        assert [c.id for c in store.results] == ["a", "b", "c"]
        assert store.results_job_id == "job-1"

    def test_replacement_is_wholesale(self, store: ResultStore) -> None:
        store.activate("job-2")
        assert store.set_results([_candidate("z")], job_id="job-2") is True
        assert [c.id for c in store.results] == ["z"]

    def test_stale_job_discarded(self, store: ResultStore) -> None:
        store.activate("job-2")
        assert store.set_results([_candidate("z")], job_id="job-1") is False
        assert [c.id for c in store.results] == ["a", "b", "c"]

    def test_duplicate_ids_keep_first(self) -> None:
        s = ResultStore()
        s.set_results([_candidate("a", 90), _candidate("a", 10), _candidate("b")])
        assert [(c.id, c.match_score) for c in s.results] == [("a", 90), ("b", 80)]

    def test_get_looks_across_jobs(self, store: ResultStore) -> None:
        store.activate("job-2")
        store.set_results([_candidate("z")], job_id="job-2")
        assert store.get("a") is not None
        assert store.get("nope") is None


class TestShortlist:
    def test_toggle_adds_then_removes(self, store: ResultStore) -> None:
        assert store.toggle_shortlist("b") is ShortlistChange.ADDED
        assert store.is_shortlisted("b")
        assert store.toggle_shortlist("b") is ShortlistChange.REMOVED
        assert not store.is_shortlisted("b")

    @pytest.mark.parametrize("initial", [(), ("a",), ("a", "c"), ("c", "b", "a")])
    @pytest.mark.parametrize("target", ["a", "b", "c"])
    def test_double_toggle_round_trip(
        self, store: ResultStore, initial: tuple[str, ...], target: str,
    ) -> None:
        for cid in initial:
            store.toggle_shortlist(cid)
        before = set(store.shortlist_ids)
        store.toggle_shortlist(target)
        store.toggle_shortlist(target)
        assert set(store.shortlist_ids) == before

    def test_insertion_order(self, store: ResultStore) -> None:
        for cid in ("c", "a", "b"):
            store.toggle_shortlist(cid)
        assert store.shortlist_ids == ("c", "a", "b")
        assert [c.id for c in store.shortlisted()] == ["c", "a", "b"]

    def test_unknown_id_rejected(self, store: ResultStore) -> None:
        with pytest.raises(UnknownCandidateError):
            store.toggle_shortlist("ghost")
        with pytest.raises(KeyError):
            store.toggle_shortlist("ghost")
        assert store.shortlist_ids == ()

    def test_shortlist_survives_new_results(self, store: ResultStore) -> None:
        store.toggle_shortlist("a")
        store.activate("job-2")
        store.set_results([_candidate("z")], job_id="job-2")
        assert store.shortlist_ids == ("a",)
        assert store.shortlisted()[0].name == "Candidate a"

    def test_candidate_from_earlier_job_can_be_removed(self, store: ResultStore) -> None:
        store.toggle_shortlist("a")
        store.activate("job-2")
        store.set_results([_candidate("z")], job_id="job-2")
        assert store.toggle_shortlist("a") is ShortlistChange.REMOVED

    def test_candidate_from_earlier_job_can_be_added(self, store: ResultStore) -> None:
        store.activate("job-2")
        store.set_results([_candidate("z")], job_id="job-2")
        assert store.toggle_shortlist("b") is ShortlistChange.ADDED
