"""Job poller: drives one AnalysisJob from SUBMITTED to a terminal state.

States:
  SUBMITTED -> POLLING -> COMPLETED | FAILED

Per poll:
  - "completed"        -> COMPLETED, results handed to the ResultStore
  - "failed"           -> FAILED (service), never retried
  - anything else      -> stay POLLING, sleep, poll again
  - transport error    -> retried up to PollingConfig.transport_retries
                          consecutive times, then FAILED (transport)
  - max_attempts hit   -> FAILED (timeout)

The store's active job id is the cancellation token: it is checked before
every poll and before applying any response, so a superseded job never
writes to the store.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from src.client.base import AnalysisService
from src.core.config import PollingConfig
from src.core.errors import ServiceTransportError
from src.core.schemas import AnalysisJob, Candidate, FailureKind, JobState
from src.results.store import ResultStore

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

_COMPLETED = "completed"
_FAILED = "failed"


class JobPoller:
    """Polls job status strictly sequentially until a terminal state.

    Usage::

        store.activate(job.job_id)
        job = await JobPoller(service, store, settings.polling).run(job)
        job.raise_for_failure()
    """

    def __init__(
        self,
        service: AnalysisService,
        store: ResultStore,
        policy: PollingConfig | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._service = service
        self._store = store
        self._policy = policy or PollingConfig()
        self._sleep = sleep

    async def run(self, job: AnalysisJob) -> AnalysisJob:
        """Poll ``job`` until it is COMPLETED or FAILED and return it.

        Never raises for service or transport problems; the outcome is in
        ``job.state``, ``job.failure_kind`` and ``job.last_error``. Task
        cancellation marks the job superseded and propagates.
        """
        if job.is_terminal:
            return job
        job.state = JobState.POLLING
        logger.info("Polling job %s", job.job_id)
        try:
            return await self._loop(job)
        except asyncio.CancelledError:
            if not job.is_terminal:
                self._finish_failed(job, FailureKind.SUPERSEDED, "Polling was cancelled")
            raise

    async def _loop(self, job: AnalysisJob) -> AnalysisJob:
        policy = self._policy
        transport_failures = 0

        while True:
            if not self._store.is_active(job.job_id):
                return self._supersede(job)

            job.attempts += 1
            try:
                status = await self._service.get_status(job.job_id)
            except ServiceTransportError as e:
                if not self._store.is_active(job.job_id):
                    return self._supersede(job)
                transport_failures += 1
                job.last_error = str(e)
                if transport_failures > policy.transport_retries:
                    logger.error("Polling job %s failed: %s", job.job_id, e)
                    return self._finish_failed(
                        job, FailureKind.TRANSPORT, f"Failed to get analysis results: {e}",
                    )
                logger.warning(
                    "Status check %d for job %s failed (%d/%d retries): %s",
                    job.attempts, job.job_id, transport_failures, policy.transport_retries, e,
                )
            else:
                if not self._store.is_active(job.job_id):
                    return self._supersede(job)
                transport_failures = 0
                state = status.status.strip().lower()
                logger.debug("Job %s attempt %d: %s", job.job_id, job.attempts, state)
                if state == _COMPLETED:
                    return self._complete(job, status.results or [])
                if state == _FAILED:
                    reason = status.error or "Analysis failed"
                    logger.error("Job %s failed on the service: %s", job.job_id, reason)
                    return self._finish_failed(job, FailureKind.SERVICE, reason)

            if job.attempts >= policy.max_attempts:
                logger.error("Job %s still running after %d status checks", job.job_id, job.attempts)
                return self._finish_failed(
                    job, FailureKind.TIMEOUT,
                    f"Analysis did not finish after {job.attempts} status checks",
                )
            await self._sleep(policy.delay_for(job.attempts))

    def _complete(self, job: AnalysisJob, results: list[Candidate]) -> AnalysisJob:
        if not self._store.set_results(results, job_id=job.job_id):
            return self._supersede(job)
        job.results = list(self._store.results)
        job.state = JobState.COMPLETED
        job.last_error = None
        job.finished_at = datetime.now()
        logger.info("Job %s completed with %d candidates", job.job_id, len(job.results))
        return job

    def _supersede(self, job: AnalysisJob) -> AnalysisJob:
        logger.info("Job %s is no longer active; dropping its status", job.job_id)
        return self._finish_failed(job, FailureKind.SUPERSEDED, "Superseded by a newer analysis")

    @staticmethod
    def _finish_failed(job: AnalysisJob, kind: FailureKind, reason: str) -> AnalysisJob:
        job.state = JobState.FAILED
        job.failure_kind = kind
        job.last_error = reason
        job.finished_at = datetime.now()
        return job
