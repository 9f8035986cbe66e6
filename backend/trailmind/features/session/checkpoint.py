"""
Checkpoint Store

Persists the active session as one JSON document in a per-installation
directory and reads it back once at process start.

Failure policy:
- save(): I/O errors are logged and swallowed; in-memory state stays
  authoritative and the next save retries
- load(): missing, unreadable, corrupt or invalid documents mean
  "no checkpoint"
"""

import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from trailmind.config import settings
from trailmind.shared.exceptions import CheckpointError
from .schemas import SessionCheckpoint

logger = logging.getLogger(__name__)


class CheckpointStore:
    """
    File-backed checkpoint persistence.

    Writes are atomic (temp file + rename) so a crash mid-write never
    leaves a truncated document behind. A lock keeps save() and clear()
    from interleaving when saves run on a worker thread.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else settings.checkpoint_path
        self._lock = threading.Lock()

    def exists(self) -> bool:
        return self.path.exists()

    def write(self, checkpoint: SessionCheckpoint) -> None:
        """
        Write a checkpoint, raising on failure.

        Raises:
            CheckpointError: If the document cannot be written
        """
        payload = checkpoint.model_dump_json()
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        fh.write(payload)
                    os.replace(tmp_name, self.path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise CheckpointError(f"Cannot write checkpoint {self.path}: {e}") from e

    def read(self) -> SessionCheckpoint:
        """
        Read and validate the checkpoint, raising on any problem.

        Raises:
            CheckpointError: If missing, unreadable or invalid
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise CheckpointError(f"Cannot read checkpoint {self.path}: {e}") from e

        try:
            return SessionCheckpoint.model_validate_json(raw)
        except ValidationError as e:
            raise CheckpointError(f"Invalid checkpoint {self.path}: {e.error_count()} errors") from e

    def save(self, checkpoint: SessionCheckpoint) -> bool:
        """Best-effort write. Returns True when the document was written."""
        try:
            self.write(checkpoint)
        except CheckpointError as e:
            logger.warning(f"Checkpoint save skipped: {e}")
            return False
        logger.debug(f"Checkpoint saved ({len(checkpoint.route)} points, {len(checkpoint.segments)} segments)")
        return True

    def load(self) -> Optional[SessionCheckpoint]:
        """Return the stored checkpoint, or None if there is no usable one."""
        if not self.path.exists():
            return None
        try:
            return self.read()
        except CheckpointError as e:
            logger.warning(f"Ignoring checkpoint: {e}")
            return None

    def clear(self) -> None:
        """Delete the checkpoint. Idempotent."""
        with self._lock:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Cannot delete checkpoint {self.path}: {e}")


class SaveCadence:
    """
    Decides when a non-forced checkpoint save is due.

    Forced saves always go through; others need `interval_seconds`
    since the last save.
    """

    def __init__(self, interval_seconds: float):
        self.interval_seconds = interval_seconds
        self.last_saved_at: Optional[datetime] = None

    def is_due(self, now: datetime, force: bool = False) -> bool:
        if force or self.last_saved_at is None:
            return True
        return (now - self.last_saved_at).total_seconds() >= self.interval_seconds

    def mark_saved(self, now: datetime) -> None:
        self.last_saved_at = now

    def reset(self) -> None:
        self.last_saved_at = None
