"""Result store: the active result set, the active job id, and the shortlist.

Single-owner state. All mutation happens on the event loop that owns the
session, so there is no locking.
"""

import logging
from collections.abc import Iterable

from src.core.errors import UnknownCandidateError
from src.core.schemas import Candidate, ShortlistChange

logger = logging.getLogger(__name__)


class ResultStore:
    """Holds the current results and an insertion-ordered shortlist.

    Results are replaced wholesale, and only for the active job id. The
    shortlist outlives result replacement; it can hold any candidate seen
    in a completed job during this session.
    """

    def __init__(self) -> None:
        self._results: tuple[Candidate, ...] = ()
        self._results_job_id: str | None = None
        self._active_job_id: str | None = None
        self._seen: dict[str, Candidate] = {}
        self._shortlist: dict[str, Candidate] = {}

    # -- active job -----------------------------------------------------

    @property
    def active_job_id(self) -> str | None:
        return self._active_job_id

    def activate(self, job_id: str) -> None:
        """Make ``job_id`` the only job whose results may be applied."""
        if self._active_job_id and self._active_job_id != job_id:
            logger.info("Job %s superseded by %s", self._active_job_id, job_id)
        self._active_job_id = job_id

    def is_active(self, job_id: str) -> bool:
        return job_id == self._active_job_id

    # -- results --------------------------------------------------------

    @property
    def results(self) -> tuple[Candidate, ...]:
        return self._results

    @property
    def results_job_id(self) -> str | None:
        """Job whose results are currently held, if any."""
        return self._results_job_id

    def set_results(self, candidates: Iterable[Candidate], job_id: str | None = None) -> bool:
        """Replace the result set.

        When ``job_id`` is given and is not the active job, nothing changes
        and False is returned.
        """
        if job_id is not None and not self.is_active(job_id):
            logger.info("Discarding results for stale job %s", job_id)
            return False

        unique: dict[str, Candidate] = {}
        for c in candidates:
            if c.id in unique:
                logger.warning("Duplicate candidate id %s in results; keeping first", c.id)
                continue
            unique[c.id] = c

        self._results = tuple(unique.values())
        self._results_job_id = job_id
        self._seen.update(unique)
        logger.debug("Result set replaced: %d candidates", len(self._results))
        return True

    def get(self, candidate_id: str) -> Candidate | None:
        """Look a candidate up among everything seen this session."""
        return self._seen.get(candidate_id)

    # -- shortlist ------------------------------------------------------

    def toggle_shortlist(self, candidate_id: str) -> ShortlistChange:
        """Flip shortlist membership. Two toggles in a row are a no-op.

        Raises:
            UnknownCandidateError: if the id never appeared in any results.
        """
        if candidate_id in self._shortlist:
            del self._shortlist[candidate_id]
            logger.info("Removed %s from shortlist", candidate_id)
            return ShortlistChange.REMOVED

        candidate = self._seen.get(candidate_id)
        if candidate is None:
            msg = f"Unknown candidate id: {candidate_id}"
            raise UnknownCandidateError(msg)
        self._shortlist[candidate_id] = candidate
        logger.info("Added %s to shortlist", candidate_id)
        return ShortlistChange.ADDED

    def is_shortlisted(self, candidate_id: str) -> bool:
        return candidate_id in self._shortlist

    @property
    def shortlist_ids(self) -> tuple[str, ...]:
        """Shortlisted ids in the order they were added."""
        return tuple(self._shortlist)

    def shortlisted(self) -> list[Candidate]:
        return list(self._shortlist.values())
