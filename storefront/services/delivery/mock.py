"""
Mock Delivery Service Implementation

Simulates a delivery-dispatch provider without making API calls.
Used in development mode (ENV_MODE=development), and as the Uber
provider, whose integration answers with canned responses.

Behavior:
    - Delivery ids of the form mock_<order_id>
    - Status "created", eta "20 mins"
    - Pickup in 15 minutes, dropoff 30 minutes after pickup
    - Optional simulated latency and failure rate

Version: 1.0.0
"""

import asyncio
import json
import logging
import random
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from storefront.services.delivery.base import (
    BaseDeliveryService,
    CancellationResult,
    DeliveryRequest,
    DeliveryResult,
    DeliveryStatusResult,
)

logger = logging.getLogger(__name__)

_ZIP_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")


class MockDeliveryService(BaseDeliveryService):
    """
    In-process delivery provider.

    Attributes:
        failure_rate: Probability of a simulated provider failure (0.0-1.0)
        min_latency: Minimum response time in seconds
        max_latency: Maximum response time in seconds

    Example:
        >>> service = MockDeliveryService()
        >>> result = await service.create_delivery(request)
        >>> result.delivery_id
        'mock_order-42'
    """

    def __init__(
        self,
        provider: str = "mock",
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self._provider = provider
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self._deliveries: dict[str, DeliveryStatusResult] = {}

        logger.info(
            f"MockDeliveryService initialized "
            f"(provider={provider}, failure_rate={failure_rate:.0%})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return self._provider

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        """Determine if this request should simulate a failure."""
        return random.random() < self.failure_rate

    def _not_found(self, delivery_id: str) -> DeliveryStatusResult:
        return DeliveryStatusResult(
            success=False,
            delivery_id=delivery_id,
            provider=self._provider,
            error_message=f"Delivery {delivery_id} not found",
            error_code="not_found",
        )

    async def create_delivery(self, request: DeliveryRequest) -> DeliveryResult:
        logger.info(
            f"Mock: delivery request for order {request.order_id} "
            f"(restaurant={request.restaurant_id}, amount={request.total_amount})"
        )

        latency_ms = await self._simulate_latency()

        if self._should_fail():
            logger.debug("Mock: Simulated delivery failure")
            return DeliveryResult(
                success=False,
                provider=self._provider,
                error_message=f"Failed to trigger {self._provider} delivery",
                error_code="service_unavailable",
                response_time_ms=latency_ms,
            )

        now = datetime.now(timezone.utc)
        pickup_at = now + timedelta(minutes=self.PICKUP_LEAD_MINUTES)
        dropoff_at = pickup_at + timedelta(minutes=self.DELIVERY_MINUTES)
        delivery_id = f"mock_{request.order_id}"

        self._deliveries[delivery_id] = DeliveryStatusResult(
            success=True,
            delivery_id=delivery_id,
            order_id=request.order_id,
            provider=self._provider,
            status="created",
            timestamp=now.isoformat(),
            estimated_delivery_time=dropoff_at.isoformat(),
        )

        return DeliveryResult(
            success=True,
            delivery_id=delivery_id,
            provider=self._provider,
            status="created",
            estimated_pickup_time=pickup_at.isoformat(),
            estimated_delivery_time=dropoff_at.isoformat(),
            eta="20 mins",
            response_time_ms=latency_ms,
        )

    async def get_delivery_status(self, delivery_id: str) -> DeliveryStatusResult:
        await self._simulate_latency()

        status = self._deliveries.get(delivery_id)
        if status is None:
            return self._not_found(delivery_id)
        return status

    async def cancel_delivery(
        self,
        delivery_id: str,
        reason: str = "Customer requested cancellation",
    ) -> CancellationResult:
        await self._simulate_latency()

        status = self._deliveries.get(delivery_id)
        if status is None:
            return CancellationResult(
                success=False,
                delivery_id=delivery_id,
                provider=self._provider,
                error_message=f"Delivery {delivery_id} not found",
                error_code="not_found",
            )

        status.status = "cancelled"
        status.timestamp = datetime.now(timezone.utc).isoformat()
        logger.info(f"Mock: delivery {delivery_id} cancelled ({reason})")

        return CancellationResult(
            success=True,
            delivery_id=delivery_id,
            provider=self._provider,
        )

    async def check_availability(self, zip_code: str) -> bool:
        """Any well-formed US zip code is deliverable."""
        return bool(_ZIP_PATTERN.match(zip_code or ""))

    async def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> Optional[DeliveryStatusResult]:
        """Accept any signature; reject bodies that are not JSON objects."""
        try:
            data = json.loads(payload)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None

        result = DeliveryStatusResult(
            success=True,
            delivery_id=data.get("delivery_id"),
            order_id=data.get("external_delivery_id"),
            provider=self._provider,
            status=data.get("status"),
            timestamp=data.get("updated_at"),
        )
        if result.delivery_id in self._deliveries:
            self._deliveries[result.delivery_id] = result
        return result

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        logger.debug("Mock: Delivery health check passed")
        return True
