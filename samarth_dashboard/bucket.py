"""
File storage for uploaded reports.

Objects are addressed by slash-separated paths ("incoming_reports/x.csv")
under a root directory. After processing, a report is moved out of the
incoming prefix into its outcome location, keeping its base filename:

    incoming_reports/<name>  ->  processed_reports/<name>
                             ->  processed_reports/unsupported_<name>
                             ->  processed_reports/empty_<name>
                             ->  error_reports/<name>
"""

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath

from .config import (
    EMPTY_MARKER,
    ERROR_PREFIX,
    INCOMING_PREFIX,
    PROCESSED_PREFIX,
    UNSUPPORTED_MARKER,
)

logger = logging.getLogger(__name__)


def base_name(path: str) -> str:
    return PurePosixPath(path).name


def outcome_path(path: str, outcome: str) -> str:
    """Return the destination path for a report given its outcome.

    outcome is one of 'processed', 'unsupported', 'empty', 'error'.
    """
    name = base_name(path)
    if outcome == "processed":
        return f"{PROCESSED_PREFIX}{name}"
    if outcome == "unsupported":
        return f"{PROCESSED_PREFIX}{UNSUPPORTED_MARKER}{name}"
    if outcome == "empty":
        return f"{PROCESSED_PREFIX}{EMPTY_MARKER}{name}"
    if outcome == "error":
        return f"{ERROR_PREFIX}{name}"
    raise ValueError(f"Unknown outcome: {outcome}")


def upload_name(filename: str, now: datetime | None = None) -> str:
    """Incoming path for a new upload, prefixed with a millisecond timestamp."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{INCOMING_PREFIX}{millis}-{base_name(filename)}"


class ReportBucket:
    """A directory tree standing in for object storage."""

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _resolve(self, path: str) -> Path:
        parts = PurePosixPath(path).parts
        if PurePosixPath(path).is_absolute() or ".." in parts:
            raise ValueError(f"Invalid object path: {path}")
        return self.root.joinpath(*parts)

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def read_bytes(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def write_bytes(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    def move(self, src: str, dest: str) -> None:
        target = self._resolve(dest)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(self._resolve(src)), str(target))
        logger.info("Moved %s to %s", src, dest)

    def list(self, prefix: str = "") -> list[str]:
        """Return object paths under `prefix`, sorted."""
        base = self._resolve(prefix) if prefix else self.root
        if not base.exists():
            return []
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in base.rglob("*")
            if p.is_file()
        )
