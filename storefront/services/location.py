"""
Delivery Location Store

Keeps the customer's chosen delivery address under its own storage key.
Falls back to the configured default when nothing usable is stored.
"""

import logging
from typing import Optional

from storefront.core.config import get_settings
from storefront.services.storage.base import BaseKeyValueStorage, StorageError

logger = logging.getLogger(__name__)


class LocationStore:
    """Single delivery-location value with best-effort persistence."""

    def __init__(
        self,
        storage: BaseKeyValueStorage,
        storage_key: Optional[str] = None,
        default: Optional[str] = None,
    ):
        settings = get_settings()
        self._storage = storage
        self.storage_key = storage_key or settings.location_storage_key
        self.default = default or settings.default_location
        self._location = self._load()

    def _load(self) -> str:
        try:
            saved = self._storage.get_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to read location from storage: {e}")
            return self.default

        if saved is None or not saved.strip():
            return self.default
        return saved

    @property
    def location(self) -> str:
        return self._location

    @property
    def is_default(self) -> bool:
        return self._location == self.default

    def update(self, location: str) -> str:
        """
        Set a new delivery location.

        Raises:
            ValueError: If the location is blank
        """
        if not location or not location.strip():
            raise ValueError("Location must not be empty")

        self._location = location.strip()
        try:
            self._storage.set_item(self.storage_key, self._location)
        except StorageError as e:
            logger.error(f"Failed to save location to storage: {e}")

        return self._location
