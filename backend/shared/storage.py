"""Storage abstraction for the persisted application state blob.

The whole application state is one JSON document. LocalStateStorage writes
it atomically (temp file then rename) with owner-only permissions so a crash
mid-write never leaves a truncated file behind.
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

# Owner-only permissions for the state file.
_STATE_FILE_MODE = 0o600


class StateStorage(Protocol):
    """Protocol for loading and saving the serialized state blob."""

    def load(self) -> str | None: ...

    def save(self, content: str) -> None: ...


class LocalStateStorage:
    """Keeps the state blob in a single file on the local filesystem."""

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path).resolve()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> str | None:
        """Return the stored blob, or None when nothing has been saved yet.

        Read failures of an existing file propagate; the caller decides
        whether to fall back to a fresh state.
        """
        if not self._file_path.exists():
            return None
        return self._file_path.read_text(encoding="utf-8")

    def save(self, content: str) -> None:
        """Atomically replace the stored blob.

        Creates the parent directory lazily on first write.
        """
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=str(self._file_path.parent), suffix=".tmp", prefix=".state_")
        fd_owned = True
        try:
            with os.fdopen(fd, "wb") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content.encode("utf-8"))
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _STATE_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(self._file_path)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.debug("saved state", path=str(self._file_path), size=len(content))


class MemoryStateStorage:
    """Keeps the state blob in memory. Used by tests and embedded callers."""

    def __init__(self, content: str | None = None) -> None:
        self.content = content
        self.save_count = 0

    def load(self) -> str | None:
        return self.content

    def save(self, content: str) -> None:
        self.content = content
        self.save_count += 1
