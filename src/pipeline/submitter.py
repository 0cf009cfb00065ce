"""Job submitter: validates a job request and starts it on the service."""

import logging
from collections.abc import Sequence

from src.client.base import AnalysisService
from src.core.errors import JobValidationError, ServiceTransportError, SubmissionError
from src.core.schemas import AnalysisJob, FileStatus, JobRequest, JobState, StagedFile

logger = logging.getLogger(__name__)


def build_request(title: str, description: str, files: Sequence[StagedFile]) -> JobRequest:
    """Check the request fields in order and return an immutable JobRequest.

    Raises:
        JobValidationError: naming the first missing field (title, description, files).
    """
    if not title or not title.strip():
        msg = "Please provide a job title."
        raise JobValidationError("title", msg)
    if not description or not description.strip():
        msg = "Please provide a job description."
        raise JobValidationError("description", msg)
    pending = tuple(f for f in files if f.status is FileStatus.PENDING)
    if not pending:
        msg = "Please upload at least one resume."
        raise JobValidationError("files", msg)
    return JobRequest(title=title.strip(), description=description.strip(), files=pending)


class JobSubmitter:
    """Packages a job request and issues exactly one submission call."""

    def __init__(self, service: AnalysisService) -> None:
        self._service = service

    async def submit(
        self,
        title: str,
        description: str,
        files: Sequence[StagedFile],
    ) -> AnalysisJob:
        """Submit a job and return it in the SUBMITTED state.

        Safe to call again with the same arguments after a SubmissionError;
        the service hands out a fresh id each time.

        Raises:
            JobValidationError: before any network call, if a field is missing.
            SubmissionError: if the service could not create the job.
        """
        request = build_request(title, description, files)
        try:
            analysis_id = await self._service.submit_analysis(
                request.title, request.description, request.files,
            )
        except ServiceTransportError as e:
            logger.error("Submission of '%s' failed: %s", request.title, e)
            msg = f"Failed to start analysis: {e}"
            raise SubmissionError(msg) from e

        logger.info(
            "Submitted '%s' with %d resume(s) as job %s",
            request.title, len(request.files), analysis_id,
        )
        return AnalysisJob(job_id=analysis_id, state=JobState.SUBMITTED)
