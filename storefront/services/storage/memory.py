"""
In-Memory Storage Implementation

Dict-backed key-value storage. Used with STORAGE_BACKEND=memory and
throughout the test suite.

Behavior:
    - Values live for the lifetime of the instance
    - Optional quota (in bytes of stored values) to simulate a full store
    - Optional write failure switch to exercise best-effort persistence

Version: 1.0.0
"""

import logging
from typing import Optional

from storefront.services.storage.base import BaseKeyValueStorage, StorageError

logger = logging.getLogger(__name__)


class InMemoryStorage(BaseKeyValueStorage):
    """
    Process-local key-value storage.

    Attributes:
        quota_bytes: Maximum total size of stored values (None = unlimited)
        fail_writes: When True, every write raises StorageError

    Example:
        >>> storage = InMemoryStorage(quota_bytes=1024)
        >>> storage.set_item("key", "value")
        >>> storage.get_item("key")
        'value'
    """

    def __init__(
        self,
        initial: Optional[dict[str, str]] = None,
        quota_bytes: Optional[int] = None,
        fail_writes: bool = False,
    ):
        self._items: dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes
        self.fail_writes = fail_writes

        logger.debug(
            f"InMemoryStorage initialized "
            f"(keys={len(self._items)}, quota={quota_bytes})"
        )

    @property
    def backend_name(self) -> str:
        """Return the backend name."""
        return "memory"

    def _used_bytes(self, excluding: Optional[str] = None) -> int:
        return sum(
            len(value.encode("utf-8"))
            for key, value in self._items.items()
            if key != excluding
        )

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Write to '{key}' rejected")

        if self.quota_bytes is not None:
            needed = self._used_bytes(excluding=key) + len(value.encode("utf-8"))
            if needed > self.quota_bytes:
                raise StorageError(
                    f"Quota exceeded writing '{key}' "
                    f"({needed} > {self.quota_bytes} bytes)"
                )

        self._items[key] = value

    def remove_item(self, key: str) -> None:
        if self.fail_writes:
            raise StorageError(f"Write to '{key}' rejected")
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        """List stored keys."""
        return list(self._items)

    def health_check(self) -> bool:
        """In-memory storage is healthy unless writes are switched off."""
        return not self.fail_writes
