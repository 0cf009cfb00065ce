"""Tests for JobSubmitter: validation order, single submission call, errors."""

from collections.abc import AsyncIterator, Sequence

import pytest

from src.client.base import AnalysisService
from src.core.errors import JobValidationError, ServiceTransportError, SubmissionError
from src.core.schemas import (
    CandidateDetail,
    FileStatus,
    JobState,
    StagedFile,
    StatusResponse,
)
from src.pipeline.submitter import JobSubmitter, build_request


class RecordingService(AnalysisService):
    """Records submissions; optionally fails them."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str, tuple[StagedFile, ...]]] = []
        self._next_id = 0

    async def submit_analysis(
        self, title: str, description: str, files: Sequence[StagedFile],
    ) -> str:
        self.calls.append((title, description, tuple(files)))
        if self.fail:
            msg = "connection refused"
            raise ServiceTransportError(msg)
        self._next_id += 1
        return f"job-{self._next_id}"

    async def get_status(self, analysis_id: str) -> StatusResponse:
        raise NotImplementedError

    async def get_candidate(self, candidate_id: str) -> CandidateDetail:
        raise NotImplementedError

    async def export_report(self, analysis_id: str) -> bytes:
        raise NotImplementedError

    async def stream_export(self, analysis_id: str) -> AsyncIterator[bytes]:
        raise NotImplementedError
        yield b""


def _file(name: str = "cv.pdf", status: FileStatus = FileStatus.PENDING) -> StagedFile:
    return StagedFile(name=name, size_bytes=4, mime_type="application/pdf", status=status, content=b"data")


# ---------------------------------------------------------------------------
# build_request
# ---------------------------------------------------------------------------


class TestBuildRequest:
    def test_valid(self) -> None:
        files = [_file("a.pdf"), _file("b.pdf")]
        req = build_request("  Backend Engineer ", "Python, AWS", files)
        assert req.title == "Backend Engineer"
        assert [f.name for f in req.files] == ["a.pdf", "b.pdf"]

    @pytest.mark.parametrize(
        ("title", "description", "files", "field"),
        [
            ("", "desc", [_file()], "title"),
            ("   ", "desc", [_file()], "title"),
            ("Title", "", [_file()], "description"),
            ("Title", "\n\t", [_file()], "description"),
            ("Title", "desc", [], "files"),
            ("", "", [], "title"),
            ("Title", "", [], "description"),
        ],
    )
    def test_first_failing_field_named(
        self, title: str, description: str, files: list[StagedFile], field: str,
    ) -> None:
        with pytest.raises(JobValidationError) as exc_info:
            build_request(title, description, files)
        assert exc_info.value.field == field

    def test_rejected_files_do_not_count(self) -> None:
        with pytest.raises(JobValidationError) as exc_info:
            build_request("Title", "desc", [_file(status=FileStatus.REJECTED)])
        assert exc_info.value.field == "files"

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            build_request("", "desc", [_file()])


# ---------------------------------------------------------------------------
# JobSubmitter.submit
# ---------------------------------------------------------------------------


class TestSubmit:
    async def test_success_creates_submitted_job(self) -> None:
        service = RecordingService()
        job = await JobSubmitter(service).submit("Title", "desc", [_file()])
        assert job.job_id == "job-1"
        assert job.state is JobState.SUBMITTED
        assert job.results is None
        assert len(service.calls) == 1

    async def test_uploads_all_files_once(self) -> None:
        service = RecordingService()
        files = [_file("a.pdf"), _file("b.pdf")]
        await JobSubmitter(service).submit("Title", "desc", files)
        title, description, sent = service.calls[0]
        assert (title, description) == ("Title", "desc")
        assert [f.name for f in sent] == ["a.pdf", "b.pdf"]

    @pytest.mark.parametrize(
        ("title", "description", "files"),
        [("", "desc", [_file()]), ("Title", "", [_file()]), ("Title", "desc", [])],
    )
    async def test_invalid_request_makes_no_call(
        self, title: str, description: str, files: list[StagedFile],
    ) -> None:
        service = RecordingService()
        with pytest.raises(JobValidationError):
            await JobSubmitter(service).submit(title, description, files)
        assert service.calls == []

    async def test_transport_failure_raises_submission_error(self) -> None:
        service = RecordingService(fail=True)
        with pytest.raises(SubmissionError) as exc_info:
            await JobSubmitter(service).submit("Title", "desc", [_file()])
        assert isinstance(exc_info.value.__cause__, ServiceTransportError)

    async def test_retry_after_failure_gets_fresh_job(self) -> None:
        service = RecordingService(fail=True)
        submitter = JobSubmitter(service)
        with pytest.raises(SubmissionError):
            await submitter.submit("Title", "desc", [_file()])
        service.fail = False
        first = await submitter.submit("Title", "desc", [_file()])
        second = await submitter.submit("Title", "desc", [_file()])
        assert first.job_id != second.job_id
        assert len(service.calls) == 3
