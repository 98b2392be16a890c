"""
Key-value blob stores backing the caches and the price history.
"""

import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_]")


def sanitize_key(key: str) -> str:
    """Reduce a key to characters that are safe in a file name."""
    cleaned = _UNSAFE_KEY_CHARS.sub("", key)
    if not cleaned:
        raise ValueError(f"Invalid storage key: {key!r}")
    return cleaned


class BlobStore(ABC):
    """Storage interface: opaque blobs addressed by a resource key."""

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the blob stored under key, or None if absent."""

    @abstractmethod
    def put(self, key: str, blob: bytes) -> None:
        """Store blob under key, creating it if absent."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was deleted."""

    @abstractmethod
    def keys(self) -> List[str]:
        """List stored keys."""

    def quarantine(self, key: str) -> None:
        """Set aside an unreadable blob so that the key reads as absent."""
        self.delete(key)

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        """
        Hold the per-key mutex guarding a read-modify-write cycle.

        Locks are re-entrant and only coordinate threads of this process.
        """
        with self._locks_guard:
            key_lock = self._locks.setdefault(key, threading.RLock())
        with key_lock:
            yield


class MemoryBlobStore(BlobStore):
    """Dict-backed store, used in tests and for throwaway runs."""

    def __init__(self):
        super().__init__()
        self._blobs: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    def put(self, key: str, blob: bytes) -> None:
        self._blobs[key] = bytes(blob)

    def delete(self, key: str) -> bool:
        return self._blobs.pop(key, None) is not None

    def keys(self) -> List[str]:
        return sorted(self._blobs)


class FileBlobStore(BlobStore):
    """Stores each key as a JSON file in a data directory, replacing files atomically."""

    SUFFIX = ".json"

    def __init__(self, data_dir: Optional[str] = None):
        """
        Initialize the file store with the specified directory.

        Args:
            data_dir: Directory for data files. If None, uses ./data.
        """
        super().__init__()
        if data_dir is None:
            data_dir = "data"

        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)

        logger.debug(f"FileBlobStore initialized with directory: {self._data_dir}")

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """Get the file path holding a key."""
        return self._data_dir / (sanitize_key(key) + self.SUFFIX)

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def put(self, key: str, blob: bytes) -> None:
        path = self.path_for(key)
        fd, temp_name = tempfile.mkstemp(dir=self._data_dir, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted {path}")
            return True
        return False

    def keys(self) -> List[str]:
        return sorted(p.stem for p in self._data_dir.glob(f"*{self.SUFFIX}"))

    def quarantine(self, key: str) -> None:
        path = self.path_for(key)
        if not path.exists():
            return
        corrupted = path.with_suffix(f'.corrupted.{datetime.now().strftime("%Y%m%d_%H%M%S")}')
        os.replace(path, corrupted)
        logger.warning(f"Moved corrupted data file to {corrupted}")
