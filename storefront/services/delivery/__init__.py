"""
Delivery Service Factory

Single entry point for the configured delivery-dispatch provider.

Usage:
    from storefront.services.delivery import get_delivery_service

    delivery_service = get_delivery_service()
    result = await delivery_service.create_delivery(request)

Environment Switching:
    - ENV_MODE=development → MockDeliveryService (no API calls)
    - DELIVERY_PROVIDER=doordash → DoorDashDeliveryService
    - DELIVERY_PROVIDER=uber → MockDeliveryService labelled "uber"

Version: 1.0.0
"""

import logging
from functools import lru_cache

from storefront.core.config import get_settings
from storefront.services.delivery.base import (
    Address,
    BaseDeliveryService,
    CancellationResult,
    DeliveryEstimate,
    DeliveryItem,
    DeliveryRequest,
    DeliveryResult,
    DeliveryStatusResult,
    DriverInfo,
)
from storefront.services.delivery.doordash import DoorDashDeliveryService
from storefront.services.delivery.mock import MockDeliveryService

logger = logging.getLogger(__name__)


@lru_cache()
def get_delivery_service() -> BaseDeliveryService:
    """
    Get the configured delivery service instance (cached).

    Raises:
        ValueError: Unknown provider, or DoorDash credentials missing
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Delivery Service: Using MockDeliveryService (development mode)")
        return MockDeliveryService(
            failure_rate=0.05,
            min_latency=0.1,
            max_latency=0.4,
        )

    provider = settings.delivery_provider.lower()
    if provider == "doordash":
        logger.info(
            f"Delivery Service: Using DoorDashDeliveryService "
            f"({settings.env_mode.value} mode)"
        )
        return DoorDashDeliveryService()
    if provider == "uber":
        logger.info("Delivery Service: Using MockDeliveryService for uber")
        return MockDeliveryService(provider="uber")

    raise ValueError(f"Unknown delivery provider: {settings.delivery_provider}")


def get_available_providers() -> list[str]:
    """
    Providers this deployment could dispatch through.

    Development only has the mock. Otherwise DoorDash is listed when its
    JWT credentials are configured; uber needs none.
    """
    settings = get_settings()
    if settings.is_development:
        return ["mock"]

    providers = []
    if (settings.doordash_developer_id and settings.doordash_key_id
            and settings.doordash_signing_secret):
        providers.append("doordash")
    providers.append("uber")
    return providers


def reset_delivery_service() -> None:
    """Clear the cached delivery service instance."""
    get_delivery_service.cache_clear()
    logger.debug("Delivery service cache cleared")


__all__ = [
    "get_delivery_service",
    "get_available_providers",
    "reset_delivery_service",
    "Address",
    "BaseDeliveryService",
    "CancellationResult",
    "DeliveryEstimate",
    "DeliveryItem",
    "DeliveryRequest",
    "DeliveryResult",
    "DeliveryStatusResult",
    "DriverInfo",
    "DoorDashDeliveryService",
    "MockDeliveryService",
]
