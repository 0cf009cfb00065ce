"""Abstract base class for the analysis service boundary."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence

from src.core.schemas import CandidateDetail, StagedFile, StatusResponse


class AnalysisService(ABC):
    """What the client needs from the external analysis service.

    Implementations raise ServiceTransportError for every transport or
    protocol failure.
    """

    @abstractmethod
    async def submit_analysis(
        self,
        title: str,
        description: str,
        files: Sequence[StagedFile],
    ) -> str:
        """Start a job and return the service-assigned analysis id."""

    @abstractmethod
    async def get_status(self, analysis_id: str) -> StatusResponse:
        """Fetch the current status of a job."""

    @abstractmethod
    async def get_candidate(self, candidate_id: str) -> CandidateDetail:
        """Fetch the full record for one candidate."""

    @abstractmethod
    async def export_report(self, analysis_id: str) -> bytes:
        """Download the report for a completed job in one piece."""

    @abstractmethod
    def stream_export(self, analysis_id: str) -> AsyncIterator[bytes]:
        """Yield the report for a completed job chunk by chunk."""
