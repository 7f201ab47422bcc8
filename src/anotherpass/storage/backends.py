"""Key-value persistence backends for the credential store."""

import json
import os
import tempfile
from contextlib import suppress
from pathlib import Path
from typing import Dict, Optional, Union

import structlog

from ..security import DATA_DIR_MODE, DATA_FILE_MODE, ensure_secure_permissions
from .base import KeyValueBackend, PersistenceError

logger = structlog.get_logger(__name__)


class MemoryBackend(KeyValueBackend):
    """In-process backend that keeps the committed namespace in a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        """Initialize with an optional committed namespace."""
        self.committed: Dict[str, str] = dict(initial or {})
        self._pending: Dict[str, str] = dict(self.committed)
        self.commit_count = 0
        self.fail_commits = False

    def items(self) -> Dict[str, str]:
        return dict(self.committed)

    def set(self, key: str, value: str) -> None:
        self._pending[key] = value

    def clear(self) -> None:
        self._pending.clear()

    def commit(self) -> None:
        if self.fail_commits:
            raise PersistenceError("Commit refused by memory backend")
        self.committed = dict(self._pending)
        self.commit_count += 1


class JsonFileBackend(KeyValueBackend):
    """Backend persisting the namespace as a JSON object in one file.

    Commits write a temporary sibling file and atomically replace the target,
    so a crash mid-write leaves the previous namespace intact.
    """

    def __init__(self, path: Union[str, Path]):
        """Initialize the backend.

        Args:
            path: Location of the JSON data file. Created on first commit.
        """
        self.path = Path(path).expanduser()
        self._pending: Optional[Dict[str, str]] = None

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError(f"Unexpected data in {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def items(self) -> Dict[str, str]:
        return self._read()

    def set(self, key: str, value: str) -> None:
        if self._pending is None:
            self._pending = self._read()
        self._pending[key] = value

    def clear(self) -> None:
        self._pending = {}

    def commit(self) -> None:
        data = self._pending if self._pending is not None else self._read()
        try:
            self.path.parent.mkdir(mode=DATA_DIR_MODE, parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, sort_keys=True)
                    f.flush()
                    os.fsync(f.fileno())
                os.chmod(tmp_name, DATA_FILE_MODE)
                os.replace(tmp_name, self.path)
            except BaseException:
                with suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e

        ensure_secure_permissions(self.path)
        self._pending = None
        logger.debug("namespace_committed", path=str(self.path), users=len(data))
