"""
File Storage with Concurrency Control

Persists every key in a single JSON document on disk. Reads and
read-modify-write cycles are serialized across processes with a FileLock,
so several API workers can share one data directory.

Behavior:
    - Missing document → empty store
    - Unreadable or non-object document → treated as empty, warning logged
    - Lock timeout or I/O error → StorageError

Version: 1.0.0
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from filelock import FileLock, Timeout

from storefront.services.storage.base import BaseKeyValueStorage, StorageError

logger = logging.getLogger(__name__)


class FileStorage(BaseKeyValueStorage):
    """
    File-backed key-value storage.

    Attributes:
        path: Location of the JSON document
        lock_timeout: Seconds to wait for the lock before failing

    Example:
        >>> storage = FileStorage("data/storefront.json")
        >>> storage.set_item("wrk_delivery_location", "12 Main St")
    """

    def __init__(
        self,
        path: Union[str, Path],
        lock_timeout: float = 10,
    ):
        self.path = Path(path)
        self.lock_timeout = lock_timeout
        self._lock = FileLock(f"{self.path}.lock", timeout=lock_timeout)

        logger.info(f"FileStorage initialized ({self.path})")

    @property
    def backend_name(self) -> str:
        """Return the backend name."""
        return "file"

    def _ensure_directory(self) -> None:
        """Create the data directory if needed."""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.path.parent}")

    def _read_document(self) -> dict[str, str]:
        """Load the document. Caller must hold the lock."""
        if not self.path.exists():
            return {}

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading {self.path}: {e}")
            return {}

        if not isinstance(document, dict):
            logger.warning(f"Ignoring {self.path}: expected a JSON object")
            return {}

        return {k: v for k, v in document.items() if isinstance(v, str)}

    def _write_document(self, document: dict[str, str]) -> None:
        """Atomically replace the document. Caller must hold the lock."""
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(document), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        try:
            self._ensure_directory()
            with self._lock:
                return self._read_document().get(key)
        except Timeout:
            raise StorageError(f"Lock timeout ({self.lock_timeout}s) reading '{key}'")
        except OSError as e:
            raise StorageError(f"Error reading '{key}': {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            self._ensure_directory()
            with self._lock:
                document = self._read_document()
                document[key] = value
                self._write_document(document)
        except Timeout:
            raise StorageError(f"Lock timeout ({self.lock_timeout}s) writing '{key}'")
        except OSError as e:
            raise StorageError(f"Error writing '{key}': {e}") from e

        logger.debug(f"Stored '{key}' ({len(value)} chars)")

    def remove_item(self, key: str) -> None:
        try:
            self._ensure_directory()
            with self._lock:
                document = self._read_document()
                if key in document:
                    del document[key]
                    self._write_document(document)
        except Timeout:
            raise StorageError(f"Lock timeout ({self.lock_timeout}s) removing '{key}'")
        except OSError as e:
            raise StorageError(f"Error removing '{key}': {e}") from e

    def health_check(self) -> bool:
        """Verify the data directory is writable and the lock obtainable."""
        try:
            self._ensure_directory()
            with self._lock:
                return os.access(self.path.parent, os.W_OK)
        except (Timeout, OSError) as e:
            logger.error(f"File storage health check failed: {e}")
            return False
