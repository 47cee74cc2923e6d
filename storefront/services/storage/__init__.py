"""
Storage Factory

Provides a single entry point for obtaining the key-value storage backend.
Selects InMemoryStorage or FileStorage based on STORAGE_BACKEND.

Usage:
    from storefront.services.storage import get_storage

    storage = get_storage()
    cart = CartStore(storage)

Version: 1.0.0
"""

import logging
from functools import lru_cache
from pathlib import Path

from storefront.core.config import get_settings, StorageBackend
from storefront.services.storage.base import BaseKeyValueStorage, StorageError
from storefront.services.storage.memory import InMemoryStorage
from storefront.services.storage.file import FileStorage

logger = logging.getLogger(__name__)


@lru_cache()
def get_storage() -> BaseKeyValueStorage:
    """
    Get the configured storage backend.

    The instance is cached so every store in the process shares one backend
    (and, for the in-memory backend, one set of values).

    Returns:
        BaseKeyValueStorage: Configured storage backend
    """
    settings = get_settings()

    if settings.storage_backend == StorageBackend.MEMORY:
        logger.info("Storage: Using InMemoryStorage")
        return InMemoryStorage()

    path = Path(settings.data_directory) / settings.storage_filename
    logger.info(f"Storage: Using FileStorage ({path})")
    return FileStorage(path, lock_timeout=settings.storage_lock_timeout)


def reset_storage() -> None:
    """
    Clear the cached storage instance.

    Useful for testing or when configuration changes at runtime.
    """
    get_storage.cache_clear()
    logger.debug("Storage cache cleared")


__all__ = [
    "get_storage",
    "reset_storage",
    "BaseKeyValueStorage",
    "StorageError",
    "InMemoryStorage",
    "FileStorage",
]
