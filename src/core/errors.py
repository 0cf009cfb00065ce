"""Exception hierarchy for the screening client.

Local validation errors stop at the intake/submission boundary; everything
network-origin is one of the transport-flavoured errors below.
"""


class ScreeningError(Exception):
    """Base class for every error raised by this package."""


class JobValidationError(ScreeningError, ValueError):
    """A job request is missing a required field. Never sent over the network."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class ServiceTransportError(ScreeningError):
    """The analysis service could not be reached or answered badly."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SubmissionError(ScreeningError):
    """Creating a job failed. No job exists; the caller may retry."""


class PollTransportError(ScreeningError):
    """Status queries kept failing at the transport level."""


class PollFailedError(ScreeningError):
    """The service reported the job as failed, or it never finished."""


class ExportError(ScreeningError):
    """No completed job to export, or the export request failed."""


class UnknownCandidateError(ScreeningError, KeyError):
    """A candidate id that never appeared in any completed job's results."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
