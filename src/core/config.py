"""Configuration models and YAML loader for the screening client."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

MIME_PDF = "application/pdf"
MIME_DOC = "application/msword"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

TEN_MIB = 10 * 1024 * 1024


class ServiceConfig(BaseModel):
    """Where the analysis service lives."""

    base_url: str = "http://localhost:8000"
    timeout_s: float = Field(default=30.0, ge=1.0)

    @field_validator("base_url")
    @classmethod
    def base_url_not_empty(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            msg = "base_url must not be empty"
            raise ValueError(msg)
        return v


class IntakeConfig(BaseModel):
    """File acceptance constraints checked before anything is uploaded."""

    max_file_bytes: int = Field(default=TEN_MIB, ge=1)
    accepted_mime_types: list[str] = Field(
        default_factory=lambda: [MIME_PDF, MIME_DOC, MIME_DOCX],
    )
    extension_mime_types: dict[str, str] = Field(
        default_factory=lambda: {".pdf": MIME_PDF, ".doc": MIME_DOC, ".docx": MIME_DOCX},
    )

    @field_validator("accepted_mime_types")
    @classmethod
    def at_least_one_type(cls, v: list[str]) -> list[str]:
        cleaned = [t.strip().lower() for t in v if t.strip()]
        if not cleaned:
            msg = "at least one accepted MIME type must be configured"
            raise ValueError(msg)
        return cleaned

    @field_validator("extension_mime_types")
    @classmethod
    def normalize_extensions(cls, v: dict[str, str]) -> dict[str, str]:
        return {
            (ext if ext.startswith(".") else f".{ext}").lower(): mime.lower()
            for ext, mime in v.items()
        }


class PollingConfig(BaseModel):
    """Status polling policy.

    ``transport_retries=0`` makes the first transport error terminal.
    """

    interval_s: float = Field(default=2.0, ge=0.0)
    backoff_multiplier: float = Field(default=1.0, ge=1.0)
    max_interval_s: float = Field(default=30.0, ge=0.0)
    max_attempts: int = Field(default=300, ge=1)
    transport_retries: int = Field(default=0, ge=0)

    def delay_for(self, attempt: int) -> float:
        """Delay before poll number ``attempt + 1`` (attempt is 1-based)."""
        delay = self.interval_s * (self.backoff_multiplier ** max(0, attempt - 1))
        return min(delay, max(self.max_interval_s, self.interval_s))


class StatsConfig(BaseModel):
    """Aggregate statistics options."""

    top_skills: int = Field(default=5, ge=1)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    intake: IntakeConfig = Field(default_factory=IntakeConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
