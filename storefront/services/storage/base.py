"""
Key-Value Storage Abstract Base Class

Defines the interface contract for the durable key-value storage that the
cart and location stores write through. The shape mirrors a browser's
local storage: string keys, string values, one value per key.

Implementations:
    - InMemoryStorage: process-local dict (tests, development)
    - FileStorage: JSON document on disk guarded by a file lock

Every implementation raises StorageError for read/write failures. The stores
that sit on top of this port catch it; storage is best-effort.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageError(Exception):
    """Raised when a storage backend cannot read or write a value."""


class BaseKeyValueStorage(ABC):
    """
    Abstract base class for key-value storage backends.

    Example:
        >>> storage = get_storage()
        >>> storage.set_item("west-row-kitchen-cart", "[]")
        >>> storage.get_item("west-row-kitchen-cart")
        '[]'
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """
        Return the name of the backend.

        Returns:
            str: Backend name (e.g., "memory", "file")
        """
        pass

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the value cannot be written
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Delete a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the backend cannot be written
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Verify the backend is usable.

        Returns:
            bool: True if reads and writes are possible
        """
        pass
