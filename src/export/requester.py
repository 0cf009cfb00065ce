"""Export requester: fetches the report for a completed job."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path

from src.client.base import AnalysisService
from src.core.errors import ExportError, ServiceTransportError
from src.core.schemas import AnalysisJob, JobState

logger = logging.getLogger(__name__)


def report_filename(now: datetime | None = None) -> str:
    """Default download name, e.g. ``analysis-report-1767225600000.pdf``."""
    stamp = int((now or datetime.now()).timestamp() * 1000)
    return f"analysis-report-{stamp}.pdf"


class ExportRequester:
    """Thin pass-through to the export endpoint. Holds no state of its own."""

    def __init__(self, service: AnalysisService) -> None:
        self._service = service

    async def request_export(self, job: AnalysisJob | None) -> bytes:
        """Return the full report for ``job``.

        Raises:
            ExportError: if ``job`` is not COMPLETED or the request fails.
        """
        job_id = _completed_job_id(job)
        try:
            report = await self._service.export_report(job_id)
        except ServiceTransportError as e:
            logger.error("Export for job %s failed: %s", job_id, e)
            msg = f"Failed to export report: {e}"
            raise ExportError(msg) from e
        logger.info("Exported report for job %s (%d bytes)", job_id, len(report))
        return report

    async def download(
        self,
        job: AnalysisJob | None,
        directory: str | Path,
        filename: str | None = None,
    ) -> Path:
        """Stream the report for ``job`` into ``directory`` and return the file path.

        A partially written file is removed if the transfer fails for any
        reason, cancellation included. Chunks are written off the event loop.
        """
        job_id = _completed_job_id(job)
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / (filename or report_filename())

        written = 0
        try:
            with target.open("wb") as fh:
                async for chunk in self._service.stream_export(job_id):
                    await asyncio.to_thread(fh.write, chunk)
                    written += len(chunk)
        except ServiceTransportError as e:
            target.unlink(missing_ok=True)
            logger.error("Export download for job %s failed: %s", job_id, e)
            msg = f"Failed to export report: {e}"
            raise ExportError(msg) from e
        except BaseException:
            target.unlink(missing_ok=True)
            logger.warning("Export download for job %s aborted; removed %s", job_id, target)
            raise

        logger.info("Report for job %s written to %s (%d bytes)", job_id, target, written)
        return target


def _completed_job_id(job: AnalysisJob | None) -> str:
    if job is None or job.state is not JobState.COMPLETED:
        msg = "There is no completed analysis to export"
        raise ExportError(msg)
    return job.job_id
