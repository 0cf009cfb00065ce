"""Core data models for the screening client.

Service payloads use camelCase; every model accepts both the wire name and
the Python field name.
"""

import re
import uuid
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.core.errors import PollFailedError, PollTransportError

_LEADING_INT = re.compile(r"-?\d+")


class FileStatus(str, Enum):
    PENDING = "pending"
    REJECTED = "rejected"


class RejectionReason(str, Enum):
    """Why a selected file was not staged."""

    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    EMPTY_FILE = "empty_file"


class JobState(str, Enum):
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.FAILED})


class FailureKind(str, Enum):
    """Why a job ended in FAILED."""

    SERVICE = "service"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    SUPERSEDED = "superseded"


class ScoreFilter(str, Enum):
    """Score buckets offered by the results filter."""

    ALL = "all"
    EXCELLENT = "90+"
    GOOD = "80-89"
    FAIR = "70-79"
    LOW = "<70"

    def contains(self, score: int) -> bool:
        if self is ScoreFilter.ALL:
            return True
        if self is ScoreFilter.EXCELLENT:
            return score >= 90
        if self is ScoreFilter.GOOD:
            return 80 <= score < 90
        if self is ScoreFilter.FAIR:
            return 70 <= score < 80
        return score < 70


class SortKey(str, Enum):
    SCORE = "score"
    NAME = "name"
    EXPERIENCE = "experience"


class ShortlistChange(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


class StagedFile(BaseModel):
    """A selected resume accepted for upload.

    Frozen; status changes go through ``model_copy``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    size_bytes: int = Field(ge=0)
    mime_type: str
    status: FileStatus = FileStatus.PENDING
    content: bytes = Field(default=b"", repr=False, exclude=True)


class Candidate(BaseModel):
    """One analyzed resume as returned by the service. Identity is ``id``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    email: str = ""
    phone: str = ""
    location: str | None = None
    experience_years: int = Field(
        default=0,
        validation_alias=AliasChoices("experience", "experienceYears", "experience_years"),
        serialization_alias="experience",
    )
    match_score: int = Field(alias="matchScore", ge=0, le=100)
    skills: tuple[str, ...] = ()
    highlights: tuple[str, ...] = ()
    gaps: tuple[str, ...] = ()
    summary: str | None = None
    score_breakdown: dict[str, int] | None = Field(default=None, alias="scoreBreakdown")

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("experience_years", mode="before")
    @classmethod
    def parse_experience(cls, v: Any) -> int:
        """Accept ``5``, ``"5"``, ``"5 years"``, ``"5+ yrs"``; missing means 0."""
        if v is None:
            return 0
        if isinstance(v, bool):
            msg = "experience must be a number of years"
            raise ValueError(msg)
        if isinstance(v, (int, float)):
            return int(v)
        match = _LEADING_INT.search(str(v))
        return int(match.group()) if match else 0

    @field_validator("skills", mode="before")
    @classmethod
    def dedupe_skills(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, (list, tuple)):
            return tuple(dict.fromkeys(s.strip() for s in v if isinstance(s, str) and s.strip()))
        return v

    @field_validator("highlights", "gaps", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return () if v is None else v

    @field_validator("score_breakdown")
    @classmethod
    def breakdown_in_range(cls, v: dict[str, int] | None) -> dict[str, int] | None:
        if v is None:
            return v
        for category, score in v.items():
            if not 0 <= score <= 100:
                msg = f"score for '{category}' must be within 0-100, got {score}"
                raise ValueError(msg)
        return v


class CandidateDetail(Candidate):
    """Full candidate record from ``/api/candidates/{id}``."""

    skill_categories: dict[str, list[str]] | None = Field(default=None, alias="skillCategories")


class JobRequest(BaseModel):
    """Everything one submission uploads."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    files: tuple[StagedFile, ...]


class AnalysisJob(BaseModel):
    """A submitted job. Owned by the poller until it reaches a terminal state."""

    job_id: str
    state: JobState = JobState.SUBMITTED
    results: list[Candidate] | None = None
    attempts: int = 0
    last_error: str | None = None
    failure_kind: FailureKind | None = None
    submitted_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def raise_for_failure(self) -> None:
        """Raise the typed polling error if this job FAILED; otherwise do nothing."""
        if self.state is not JobState.FAILED:
            return
        msg = self.last_error or f"Analysis {self.job_id} failed"
        if self.failure_kind is FailureKind.TRANSPORT:
            raise PollTransportError(msg)
        raise PollFailedError(msg)


class QueryState(BaseModel):
    """What the user currently asked the results view for."""

    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    score_filter: ScoreFilter = ScoreFilter.ALL
    sort_key: SortKey = SortKey.SCORE
    shortlisted_only: bool = False


class SubmitResponse(BaseModel):
    """Body of ``POST /api/analyze``."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    analysis_id: str | None = Field(default=None, alias="analysisId")

    @field_validator("analysis_id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class StatusResponse(BaseModel):
    """Body of ``GET /api/analysis/{id}/status``."""

    status: str
    results: list[Candidate] | None = None
    error: str | None = None


class SkillCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    skill: str
    count: int


class ResultStats(BaseModel):
    """Aggregates over the full, unfiltered result set."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    bucket_counts: dict[ScoreFilter, int] = Field(default_factory=dict)
    high_match: int = 0
    medium_match: int = 0
    low_match: int = 0
    average_score: int = 0
    top_skills: tuple[SkillCount, ...] = ()
