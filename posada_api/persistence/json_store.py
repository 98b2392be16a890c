"""
JSON document layer over a blob store, with corruption recovery.
"""

import json
import logging
from typing import Any, Optional

from .blob_store import BlobStore

logger = logging.getLogger(__name__)


class JsonStore:
    """Loads and saves JSON documents by key."""

    def __init__(self, blob_store: BlobStore):
        self._blobs = blob_store

    @property
    def blobs(self) -> BlobStore:
        return self._blobs

    def lock(self, key: str):
        """Per-key mutex for read-modify-write cycles."""
        return self._blobs.lock(key)

    def load(self, key: str, default: Optional[Any] = None) -> Any:
        """
        Load the JSON document stored under key.

        Args:
            key: Resource key
            default: Returned when the key is absent or unreadable

        Returns:
            The decoded document or the default
        """
        try:
            blob = self._blobs.get(key)
        except OSError as e:
            logger.error(f"Failed to read {key}: {e}")
            return default

        if blob is None:
            logger.debug(f"No stored document for {key}")
            return default

        try:
            return json.loads(blob.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Invalid JSON stored under {key}: {e}")
            self._handle_corrupted(key)
            return default

    def save(self, key: str, data: Any) -> bool:
        """
        Save a JSON document under key.

        Args:
            key: Resource key
            data: JSON-serializable document

        Returns:
            bool: True if save was successful, False otherwise
        """
        try:
            blob = json.dumps(data, separators=(',', ':')).encode('utf-8')
            self._blobs.put(key, blob)
            logger.debug(f"Saved {len(blob)} bytes under {key}")
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        return self._blobs.delete(key)

    def _handle_corrupted(self, key: str) -> None:
        try:
            self._blobs.quarantine(key)
        except OSError as e:
            logger.error(f"Failed to set aside corrupted document {key}: {e}")
