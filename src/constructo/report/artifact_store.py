"""Durable storage for rendered report bytes, keyed by job id."""

import abc
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Optional

from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from constructo.exceptions import ArtifactWriteFailure

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".part"


class ArtifactStore(abc.ABC):
    """Write-then-commit byte storage.

    ``write`` returns a reference only once the bytes are fully durable; a
    failed write leaves nothing behind under the final key.
    """

    @abc.abstractmethod
    def write(self, job_id: uuid.UUID, data: bytes, extension: str) -> str:
        """Store ``data`` and return its artifact reference."""

    @abc.abstractmethod
    def read(self, artifact_ref: str) -> Optional[bytes]:
        """Return the stored bytes, or None if the artifact does not exist."""

    @abc.abstractmethod
    def delete(self, artifact_ref: str) -> bool:
        """Remove the artifact. Returns False if it did not exist."""

    @abc.abstractmethod
    def exists(self, artifact_ref: str) -> bool:
        pass

    @staticmethod
    def ref_for(job_id: uuid.UUID, extension: str) -> str:
        """The reference a job's artifact is stored under."""
        return f"report_{job_id}.{extension}"


class LocalArtifactStore(ArtifactStore):
    """Stores artifacts as files in one directory.

    Bytes go to a temporary file in the same directory first and are moved
    into place with an atomic rename.
    """

    def __init__(self, base_dir: str = "generated/reports") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def write(self, job_id: uuid.UUID, data: bytes, extension: str) -> str:
        artifact_ref = self.ref_for(job_id, extension)
        try:
            self._write_atomic(self.base_dir / artifact_ref, data)
        except RetryError as e:
            cause = e.last_attempt.exception()
            raise ArtifactWriteFailure(f"Could not store artifact {artifact_ref}: {cause}") from cause
        logger.info("Stored artifact %s (%d bytes)", artifact_ref, len(data))
        return artifact_ref

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
    )
    def _write_atomic(self, target: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.base_dir, prefix=target.stem, suffix=TEMP_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def read(self, artifact_ref: str) -> Optional[bytes]:
        path = self._path(artifact_ref)
        if not path.is_file():
            return None
        return path.read_bytes()

    def delete(self, artifact_ref: str) -> bool:
        path = self._path(artifact_ref)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Deleted artifact %s", artifact_ref)
        return True

    def exists(self, artifact_ref: str) -> bool:
        return self._path(artifact_ref).is_file()

    def _path(self, artifact_ref: str) -> Path:
        if not artifact_ref or Path(artifact_ref).name != artifact_ref:
            raise ValueError(f"Invalid artifact reference: {artifact_ref!r}")
        return self.base_dir / artifact_ref
