"""Orchestrator: owns one screening session end to end.

Data flow:
  1. IntakeValidator stages resumes
  2. JobSubmitter starts a job on the service
  3. JobPoller polls it in a background task until terminal
  4. ResultStore receives results (active job only)
  5. Query engine / stats derive views from the store
  6. ExportRequester fetches the report for the completed job

At most one job is active. Starting a new one cancels the previous poll
task and moves the store's active job id, so a late response for the old
job is discarded.
"""

import asyncio
import contextlib
import logging
from pathlib import Path

from src.client.base import AnalysisService
from src.core.config import Settings
from src.core.schemas import (
    AnalysisJob,
    Candidate,
    CandidateDetail,
    QueryState,
    ResultStats,
    ShortlistChange,
)
from src.export.requester import ExportRequester
from src.intake.validator import IntakeValidator
from src.pipeline.poller import JobPoller, Sleep
from src.pipeline.submitter import JobSubmitter
from src.results.query import view
from src.results.stats import compute_stats
from src.results.store import ResultStore

logger = logging.getLogger(__name__)


class ScreeningSession:
    """Everything one user works with between page loads.

    Usage::

        async with HttpAnalysisService(settings.service) as service:
            session = ScreeningSession(service, settings)
            session.intake.stage_path("resumes/jane.pdf")
            await session.start_analysis("Backend Engineer", jd_text)
            job = await session.wait()
            top = session.view(QueryState(score_filter=ScoreFilter.EXCELLENT))
    """

    def __init__(
        self,
        service: AnalysisService,
        settings: Settings | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings or Settings()
        self._service = service
        self.intake = IntakeValidator(self._settings.intake)
        self.store = ResultStore()
        self._submitter = JobSubmitter(service)
        self._poller = JobPoller(service, self.store, self._settings.polling, sleep=sleep)
        self._exporter = ExportRequester(service)
        self._job: AnalysisJob | None = None
        self._task: asyncio.Task[AnalysisJob] | None = None

    @property
    def job(self) -> AnalysisJob | None:
        """The active job, if one was ever submitted."""
        return self._job

    @property
    def is_analyzing(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start_analysis(self, title: str, description: str) -> AnalysisJob:
        """Submit the staged resumes and start polling in the background.

        Validation and submission errors propagate and leave any previous
        job untouched.
        """
        job = await self._submitter.submit(title, description, self.intake.files)
        self._cancel_polling()
        self.store.activate(job.job_id)
        self._job = job
        self._task = asyncio.create_task(self._poller.run(job), name=f"poll-{job.job_id}")
        return job

    async def wait(self) -> AnalysisJob:
        """Wait for the active job to reach a terminal state and return it."""
        if self._task is None or self._job is None:
            msg = "No analysis has been started"
            raise RuntimeError(msg)
        return await self._task

    async def close(self) -> None:
        """Stop any in-flight polling."""
        task = self._cancel_polling()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def view(self, query: QueryState | None = None) -> list[Candidate]:
        """Filtered, sorted candidates for display.

        With ``shortlisted_only`` the shortlist is the source, so candidates
        from earlier jobs stay visible there.
        """
        query = query or QueryState()
        source = self.store.shortlisted() if query.shortlisted_only else self.store.results
        return view(source, self.store.shortlist_ids, query)

    def stats(self) -> ResultStats:
        return compute_stats(self.store.results, self._settings.stats.top_skills)

    def toggle_shortlist(self, candidate_id: str) -> ShortlistChange:
        return self.store.toggle_shortlist(candidate_id)

    def shortlisted(self) -> list[Candidate]:
        return self.store.shortlisted()

    async def fetch_candidate(self, candidate_id: str) -> CandidateDetail:
        """Full detail for one candidate, straight from the service."""
        return await self._service.get_candidate(candidate_id)

    async def export_report(self) -> bytes:
        return await self._exporter.request_export(self._job)

    async def download_report(self, directory: str | Path, filename: str | None = None) -> Path:
        return await self._exporter.download(self._job, directory, filename)

    def _cancel_polling(self) -> asyncio.Task[AnalysisJob] | None:
        task = self._task
        if task is not None and not task.done():
            logger.info("Cancelling %s", task.get_name())
            task.cancel()
        return task
