"""
Pydantic Schemas for Request/Response Validation

Covers the storefront HTTP API: carts, restaurant status, food images,
delivery locations and delivery dispatch.

Version: 1.0.0
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from storefront.services.cart import CartLine, CartState, CatalogItem
from storefront.services.delivery import Address, DeliveryItem, DeliveryRequest
from storefront.services.restaurant_status import RestaurantStatusResult, get_status_message

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]{1,64}$"


# =============================================================================
# CART SCHEMAS
# =============================================================================

class CartItemAdd(BaseModel):
    """Catalog item to add to a cart (one unit)."""
    menu_item_id: str = Field(..., min_length=1, examples=["m-101"])
    name: str = Field(..., min_length=1, max_length=100, examples=["Pepperoni Pizza"])
    price: Decimal = Field(..., ge=0, allow_inf_nan=False, examples=["14.99"])
    restaurant_id: str = Field(..., min_length=1, examples=["r-1"])
    restaurant_name: Optional[str] = Field(None, max_length=100, examples=["Pappi's Pizza"])
    image: Optional[str] = None
    price_override: Optional[Decimal] = Field(None, ge=0, allow_inf_nan=False)

    def to_catalog_item(self) -> CatalogItem:
        return CatalogItem(
            id=self.menu_item_id,
            name=self.name,
            price=self.price,
            restaurant_id=self.restaurant_id,
            image=self.image,
        )


class CartQuantityUpdate(BaseModel):
    """New quantity for a line; zero or less removes it."""
    quantity: int = Field(..., examples=[2])


class CartLineResponse(BaseModel):
    line_id: str
    menu_item_id: str
    name: str
    unit_price: str
    quantity: int
    line_total: str
    restaurant_id: str
    restaurant_name: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_line(cls, line: CartLine) -> "CartLineResponse":
        return cls(line_total=str(line.line_total), **line.to_dict())


class CartResponse(BaseModel):
    """Cart snapshot; prices are decimal strings."""
    session_id: str
    lines: List[CartLineResponse]
    total: str
    item_count: int

    @classmethod
    def from_state(cls, session_id: str, state: CartState) -> "CartResponse":
        return cls(
            session_id=session_id,
            lines=[CartLineResponse.from_line(line) for line in state.lines],
            total=str(state.total),
            item_count=state.item_count,
        )


# =============================================================================
# RESTAURANT STATUS SCHEMAS
# =============================================================================

class DayHoursSchema(BaseModel):
    open: str = Field(default="", examples=["09:00"])
    close: str = Field(default="", examples=["22:00"])
    closed: bool = False


class WeeklyHoursSchema(BaseModel):
    monday: DayHoursSchema
    tuesday: DayHoursSchema
    wednesday: DayHoursSchema
    thursday: DayHoursSchema
    friday: DayHoursSchema
    saturday: DayHoursSchema
    sunday: DayHoursSchema


class RestaurantStatusRequest(BaseModel):
    """Restaurant flags and hours to evaluate."""
    restaurant_id: Optional[str] = None
    is_open: bool = Field(default=True, description="Owner's manual open switch")
    is_temporarily_closed: bool = False
    operating_hours: Optional[WeeklyHoursSchema] = None
    timezone: Optional[str] = Field(None, examples=["America/Chicago"])
    at: Optional[datetime] = Field(
        None,
        description="Instant to evaluate at (defaults to now; naive means UTC)",
    )


class RestaurantStatusBatchRequest(BaseModel):
    restaurants: List[RestaurantStatusRequest] = Field(..., min_length=1)
    at: Optional[datetime] = None


class RestaurantStatusResponse(BaseModel):
    restaurant_id: Optional[str] = None
    verdict: str
    is_open: bool
    reason_code: Optional[str] = None
    next_opening_hint: Optional[str] = None
    message: str

    @classmethod
    def from_result(
        cls,
        result: RestaurantStatusResult,
        restaurant_id: Optional[str] = None,
    ) -> "RestaurantStatusResponse":
        return cls(
            restaurant_id=restaurant_id,
            message=get_status_message(result),
            **result.to_dict(),
        )


class RestaurantStatusBatchResponse(BaseModel):
    statuses: List[RestaurantStatusResponse]


# =============================================================================
# IMAGE & LOCATION SCHEMAS
# =============================================================================

class FoodImageResponse(BaseModel):
    name: str
    image: Optional[str] = None


class LocationUpdate(BaseModel):
    location: str = Field(..., min_length=1, max_length=255, examples=["350 Fifth Avenue, New York, NY"])

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Location must not be blank")
        return v.strip()


class LocationResponse(BaseModel):
    session_id: str
    location: str
    is_default: bool


# =============================================================================
# DELIVERY SCHEMAS
# =============================================================================

class AddressSchema(BaseModel):
    street: str = Field(..., min_length=1, max_length=255, examples=["350 Fifth Avenue"])
    city: str = Field(..., min_length=1, max_length=50, examples=["New York"])
    state: str = Field(..., min_length=2, max_length=50, examples=["NY"])
    zip_code: str = Field(..., examples=["10001"])
    country: str = "US"
    instructions: Optional[str] = Field(None, max_length=500)

    @field_validator("zip_code")
    @classmethod
    def validate_zip(cls, v: str) -> str:
        if not re.match(r"^\d{5}(-\d{4})?$", v):
            raise ValueError("Invalid zip code format")
        return v

    def to_address(self) -> Address:
        return Address(**self.model_dump())


class DeliveryItemSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(..., ge=1, le=99)
    price: float = Field(..., ge=0)


class DeliveryCreate(BaseModel):
    """Request schema for dispatching a delivery."""
    order_id: str = Field(..., min_length=1, examples=["order-1001"])
    restaurant_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    pickup_address: AddressSchema
    delivery_address: AddressSchema
    items: List[DeliveryItemSchema] = Field(default_factory=list)
    total_amount: float = Field(..., ge=0, examples=[42.5])
    estimated_pickup_time: Optional[str] = None
    estimated_delivery_time: Optional[str] = None
    special_instructions: Optional[str] = Field(None, max_length=500)
    pickup_address_line: Optional[str] = Field(
        None, max_length=255, description="Preformatted pickup address; overrides pickup_address"
    )
    dropoff_address_line: Optional[str] = Field(
        None, max_length=255, description="Preformatted dropoff address; overrides delivery_address"
    )
    pickup_phone: Optional[str] = None
    dropoff_phone: Optional[str] = None
    pickup_business_name: Optional[str] = None
    dropoff_business_name: Optional[str] = None

    @field_validator("pickup_phone", "dropoff_phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        cleaned = re.sub(r"[^\d]", "", v)
        if len(cleaned) < 10:
            raise ValueError("Phone number must have at least 10 digits")
        return v

    def to_request(self) -> DeliveryRequest:
        return DeliveryRequest(
            order_id=self.order_id,
            restaurant_id=self.restaurant_id,
            customer_id=self.customer_id,
            pickup_address=self.pickup_address.to_address(),
            delivery_address=self.delivery_address.to_address(),
            items=[DeliveryItem(**item.model_dump()) for item in self.items],
            total_amount=self.total_amount,
            estimated_pickup_time=self.estimated_pickup_time,
            estimated_delivery_time=self.estimated_delivery_time,
            special_instructions=self.special_instructions,
            pickup_address_line=self.pickup_address_line,
            dropoff_address_line=self.dropoff_address_line,
            pickup_phone=self.pickup_phone,
            dropoff_phone=self.dropoff_phone,
            pickup_business_name=self.pickup_business_name,
            dropoff_business_name=self.dropoff_business_name,
        )


class DeliveryCancel(BaseModel):
    reason: str = Field(default="Customer requested cancellation", max_length=255)


class AvailabilityResponse(BaseModel):
    zip_code: str
    provider: str
    available: bool


class DeliveryEstimateRequest(BaseModel):
    pickup_address: AddressSchema
    delivery_address: AddressSchema


class DeliveryEstimateResponse(BaseModel):
    provider: str
    estimated_pickup_time: str
    estimated_delivery_time: str


class ProvidersResponse(BaseModel):
    """Delivery providers this deployment can dispatch through."""
    active: str
    providers: List[str]
    count: int


# =============================================================================
# COMMON RESPONSE SCHEMAS
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    storage: str
    delivery_service: str
    environment: str
    timestamp: datetime
