"""
Delivery Service Abstract Base Class

Defines the interface contract for delivery-dispatch providers.
MockDeliveryService and DoorDashDeliveryService both implement it, so the
API layer stays the same whichever provider is configured.

Provider responses are passed through as opaque status/identifier data.
There is no retry, backoff or idempotency handling here; a failed call
comes back as a result object with success=False.

Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass
class Address:
    """Postal address of a pickup or dropoff point."""
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "US"
    instructions: Optional[str] = None

    def to_line(self) -> str:
        """Single-line form: "street, city, STATE zip"."""
        region = f"{self.state or ''} {self.zip_code or ''}".strip()
        return ", ".join(part for part in [self.street, self.city, region] if part)


@dataclass
class DeliveryItem:
    name: str
    quantity: int
    price: float


@dataclass
class DeliveryRequest:
    """
    Everything a provider needs to dispatch a courier for one order.

    Attributes:
        order_id: Our order id, sent as the provider's external id
        pickup_address / delivery_address: Structured addresses
        pickup_address_line / dropoff_address_line: Preformatted lines that
            take precedence over the structured addresses
        total_amount: Order value in dollars
        estimated_pickup_time / estimated_delivery_time: ISO 8601 strings
    """
    order_id: str
    restaurant_id: str
    customer_id: str
    pickup_address: Address
    delivery_address: Address
    items: list[DeliveryItem] = field(default_factory=list)
    total_amount: float = 0.0
    estimated_pickup_time: Optional[str] = None
    estimated_delivery_time: Optional[str] = None
    special_instructions: Optional[str] = None
    pickup_address_line: Optional[str] = None
    dropoff_address_line: Optional[str] = None
    pickup_phone: Optional[str] = None
    dropoff_phone: Optional[str] = None
    pickup_business_name: Optional[str] = None
    dropoff_business_name: Optional[str] = None


@dataclass
class DriverInfo:
    name: Optional[str] = None
    phone: Optional[str] = None
    vehicle_info: Optional[str] = None

    def to_dict(self) -> dict:
        return {"name": self.name, "phone": self.phone, "vehicle_info": self.vehicle_info}


@dataclass
class DeliveryResult:
    """
    Standardized result from creating a delivery.

    Attributes:
        success: Whether the provider accepted the delivery
        delivery_id: Provider-side identifier
        provider: Provider name
        status: Provider status string (e.g. "created")
        estimated_pickup_time / estimated_delivery_time: ISO 8601 strings
        eta: Human-readable estimate, when the provider gives one
        driver: Courier details once assigned
        tracking_url: Customer tracking page
        error_message / error_code: Failure details
        response_time_ms: Provider round-trip time
    """
    success: bool
    delivery_id: Optional[str] = None
    provider: str = "unknown"
    status: Optional[str] = None
    estimated_pickup_time: Optional[str] = None
    estimated_delivery_time: Optional[str] = None
    eta: Optional[str] = None
    driver: Optional[DriverInfo] = None
    tracking_url: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "delivery_id": self.delivery_id,
            "provider": self.provider,
            "status": self.status,
            "estimated_pickup_time": self.estimated_pickup_time,
            "estimated_delivery_time": self.estimated_delivery_time,
            "eta": self.eta,
            "driver": self.driver.to_dict() if self.driver else None,
            "tracking_url": self.tracking_url,
            "error_message": self.error_message,
            "error_code": self.error_code,
            "response_time_ms": self.response_time_ms,
        }


@dataclass
class DeliveryStatusResult:
    """Standardized delivery status (lookup or webhook)."""
    success: bool
    delivery_id: Optional[str] = None
    order_id: Optional[str] = None
    provider: str = "unknown"
    status: Optional[str] = None
    timestamp: Optional[str] = None
    driver: Optional[DriverInfo] = None
    tracking_url: Optional[str] = None
    estimated_delivery_time: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "delivery_id": self.delivery_id,
            "order_id": self.order_id,
            "provider": self.provider,
            "status": self.status,
            "timestamp": self.timestamp,
            "driver": self.driver.to_dict() if self.driver else None,
            "tracking_url": self.tracking_url,
            "estimated_delivery_time": self.estimated_delivery_time,
            "error_message": self.error_message,
            "error_code": self.error_code,
        }


@dataclass
class DeliveryEstimate:
    """Expected pickup and dropoff times (ISO 8601, UTC)."""
    provider: str
    estimated_pickup_time: str
    estimated_delivery_time: str

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "estimated_pickup_time": self.estimated_pickup_time,
            "estimated_delivery_time": self.estimated_delivery_time,
        }


@dataclass
class CancellationResult:
    success: bool
    delivery_id: Optional[str] = None
    provider: str = "unknown"
    error_message: Optional[str] = None
    error_code: Optional[str] = None


class BaseDeliveryService(ABC):
    """
    Abstract base class for delivery providers.

    Example:
        >>> service = get_delivery_service()
        >>> result = await service.create_delivery(request)
        >>> if result.success:
        ...     print(result.delivery_id, result.tracking_url)
    """

    PICKUP_LEAD_MINUTES = 15
    DELIVERY_MINUTES = 30

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the delivery provider.

        Returns:
            str: Provider name (e.g., "mock", "uber", "doordash")
        """
        pass

    @abstractmethod
    async def create_delivery(self, request: DeliveryRequest) -> DeliveryResult:
        """
        Ask the provider to dispatch a courier.

        Args:
            request: Pickup, dropoff and order details

        Returns:
            DeliveryResult: Provider identifiers and estimates
        """
        pass

    @abstractmethod
    async def get_delivery_status(self, delivery_id: str) -> DeliveryStatusResult:
        """
        Look up the current status of a delivery.

        Args:
            delivery_id: Identifier returned by create_delivery

        Returns:
            DeliveryStatusResult: Latest provider status
        """
        pass

    @abstractmethod
    async def cancel_delivery(
        self,
        delivery_id: str,
        reason: str = "Customer requested cancellation",
    ) -> CancellationResult:
        """Cancel a delivery that has not been completed."""
        pass

    @abstractmethod
    async def check_availability(self, zip_code: str) -> bool:
        """
        Check whether the provider delivers to a zip code.

        Args:
            zip_code: Dropoff zip code

        Returns:
            bool: True if deliveries can be dispatched there
        """
        pass

    @abstractmethod
    async def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> Optional[DeliveryStatusResult]:
        """
        Verify and parse a status webhook from the provider.

        Args:
            payload: Raw request body bytes
            signature: Signature header from the request

        Returns:
            DeliveryStatusResult if the webhook is authentic, None otherwise
        """
        pass

    async def estimate_delivery_time(
        self,
        pickup_address: Address,
        delivery_address: Address,
    ) -> DeliveryEstimate:
        """
        Estimate pickup and dropoff times for a new delivery.

        Providers without a quote API use the flat estimate: pickup in
        PICKUP_LEAD_MINUTES, dropoff DELIVERY_MINUTES after pickup.
        """
        pickup_at = datetime.now(timezone.utc) + timedelta(minutes=self.PICKUP_LEAD_MINUTES)
        dropoff_at = pickup_at + timedelta(minutes=self.DELIVERY_MINUTES)
        return DeliveryEstimate(
            provider=self.provider_name,
            estimated_pickup_time=pickup_at.isoformat(),
            estimated_delivery_time=dropoff_at.isoformat(),
        )

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify the provider client is usable.

        Returns:
            bool: True if service is operational
        """
        pass
