"""Key/value backends for persisted favourites."""

import contextlib
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol

from home_browser.logging import get_logger

logger = get_logger(__name__)


class KeyValueStorage(Protocol):
    """Durable string storage addressed by key.

    Concurrent writers to the same key are last-writer-wins; no merging is attempted.
    """

    def read(self, key: str) -> str | None:
        """Return the stored value, or None if the key has never been written.

        Raises:
            OSError: If the backend exists but cannot be read.
        """
        ...

    def write(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            OSError: If the write fails (disk full, read-only location...).
        """
        ...


class InMemoryStorage:
    """Storage that lives only as long as the process. Used by tests and in-memory sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value


def safe_file_name(key: str) -> str:
    """Convert a storage key to a filesystem-safe file name.

    E.g. "favourites" -> "favourites.json", "user:1/favs" -> "user_1_favs.json"
    """
    return re.sub(r"[^a-zA-Z0-9_-]", "_", key) + ".json"


class JsonFileStorage:
    """One JSON file per key inside a data directory.

    Writes go to a temporary file in the same directory and are then renamed
    over the target, so a crash mid-write never leaves a truncated file.
    """

    def __init__(self, data_dir: str | Path) -> None:
        """Initialize file storage.

        Args:
            data_dir: Directory holding the files. Created on first write.
        """
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / safe_file_name(key)

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise
        logger.debug("storage_written", key=key, path=str(path), size=len(value))

