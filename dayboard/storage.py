"""Storage transports for dayboard.

This module provides an abstract key-value byte store and concrete
implementations the persistence bridge writes to. The FileStorage
implementation keeps one file per key and uses fcntl-based file locking
around reads and writes.
"""

import fcntl
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from dayboard.errors import PersistenceError


class Storage(ABC):
    """Abstract base class for key-value byte stores."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Read the bytes stored under key.

        Args:
            key: Storage key

        Returns:
            The stored bytes, or None if nothing is stored under key

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, data: bytes) -> None:
        """Write data under key, replacing any previous value.

        Raises:
            PersistenceError: If the store cannot be written
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Removing a missing key does nothing.

        Raises:
            PersistenceError: If the store cannot be modified
        """
        pass


class MemoryStorage(Storage):
    """In-process dict-backed store."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, data: bytes) -> None:
        self._data[key] = bytes(data)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage(Storage):
    """File-based store keeping each key in <directory>/<key>.json.

    Attributes:
        directory: Directory holding the data files
    """

    def __init__(self, directory: Optional[str] = None):
        """Initialize FileStorage with a data directory.

        Args:
            directory: Directory for the data files. If None, uses the
                      current directory
        """
        self.directory = Path(directory if directory is not None else ".")

    def path_for(self, key: str) -> Path:
        """Return the file path backing key."""
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            with open(path, "rb") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    return f.read()
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            raise PersistenceError(f"Cannot read {path}: {e}") from e

    def set(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        try:
            # Ensure parent directory exists
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                try:
                    f.write(data)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            raise PersistenceError(f"Cannot write {path}: {e}") from e

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            if path.exists():
                path.unlink()
        except OSError as e:
            raise PersistenceError(f"Cannot delete {path}: {e}") from e
