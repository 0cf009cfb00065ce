"""Intake validator: stages selected resumes against type/size constraints.

Pure local bookkeeping. Nothing here touches the network, but everything
that reaches the submitter has passed through ``stage``.
"""

import logging
import mimetypes
from pathlib import Path

from src.core.config import IntakeConfig
from src.core.schemas import FileStatus, RejectionReason, StagedFile

logger = logging.getLogger(__name__)


class IntakeValidator:
    """Holds the ordered sequence of staged files for the next submission.

    Usage::

        intake = IntakeValidator(IntakeConfig())
        outcome = intake.stage("cv.pdf", data, "application/pdf")
        if isinstance(outcome, RejectionReason):
            ...  # tell the user
    """

    def __init__(self, config: IntakeConfig | None = None) -> None:
        self._config = config or IntakeConfig()
        self._staged: list[StagedFile] = []
        self._rejected: list[tuple[StagedFile, RejectionReason]] = []

    @property
    def files(self) -> tuple[StagedFile, ...]:
        """Currently staged files, in selection order."""
        return tuple(self._staged)

    @property
    def rejected(self) -> tuple[tuple[StagedFile, RejectionReason], ...]:
        """Files turned away since the last ``clear``, with the reason."""
        return tuple(self._rejected)

    def __len__(self) -> int:
        return len(self._staged)

    def resolve_mime_type(self, name: str, mime_type: str | None = None) -> str:
        """Return the declared MIME type, or infer one from the file name."""
        if mime_type and mime_type.strip():
            return mime_type.split(";")[0].strip().lower()
        suffix = Path(name).suffix.lower()
        if suffix in self._config.extension_mime_types:
            return self._config.extension_mime_types[suffix]
        guessed, _ = mimetypes.guess_type(name)
        return guessed or "application/octet-stream"

    def check(self, mime_type: str, size_bytes: int) -> RejectionReason | None:
        """Return why a file with this type and size would be rejected, if at all."""
        if mime_type not in self._config.accepted_mime_types:
            return RejectionReason.UNSUPPORTED_TYPE
        if size_bytes <= 0:
            return RejectionReason.EMPTY_FILE
        if size_bytes > self._config.max_file_bytes:
            return RejectionReason.TOO_LARGE
        return None

    def stage(
        self,
        name: str,
        content: bytes,
        mime_type: str | None = None,
    ) -> StagedFile | RejectionReason:
        """Validate one selected file and append it to the staged sequence.

        Returns the new StagedFile, or the RejectionReason if it was refused.
        """
        resolved = self.resolve_mime_type(name, mime_type)
        size = len(content)
        reason = self.check(resolved, size)
        if reason is not None:
            return self._reject(name, size, resolved, reason)

        staged = StagedFile(name=name, size_bytes=size, mime_type=resolved, content=content)
        self._staged.append(staged)
        logger.debug("Staged '%s' (%d bytes, %s)", name, size, resolved)
        return staged

    def stage_path(self, path: str | Path, mime_type: str | None = None) -> StagedFile | RejectionReason:
        """Stage a file from disk. Size is checked before the file is read."""
        path = Path(path)
        if not path.is_file():
            msg = f"Resume file not found: {path}"
            raise FileNotFoundError(msg)
        resolved = self.resolve_mime_type(path.name, mime_type)
        size = path.stat().st_size
        reason = self.check(resolved, size)
        if reason is not None:
            return self._reject(path.name, size, resolved, reason)
        return self.stage(path.name, path.read_bytes(), resolved)

    def unstage(self, file_id: str) -> None:
        """Remove a staged file by id. Unknown ids are ignored."""
        before = len(self._staged)
        self._staged = [f for f in self._staged if f.id != file_id]
        if len(self._staged) < before:
            logger.debug("Unstaged file %s", file_id)

    def clear(self) -> None:
        """Drop every staged and rejected file."""
        self._staged.clear()
        self._rejected.clear()

    def _reject(
        self,
        name: str,
        size: int,
        mime_type: str,
        reason: RejectionReason,
    ) -> RejectionReason:
        record = StagedFile(
            name=name,
            size_bytes=size,
            mime_type=mime_type,
            status=FileStatus.REJECTED,
        )
        self._rejected.append((record, reason))
        logger.warning("Rejected '%s' (%s, %d bytes): %s", name, mime_type, size, reason.value)
        return reason
