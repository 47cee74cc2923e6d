"""
FastAPI Application Entry Point

West Row Kitchen Storefront - cart, restaurant status and delivery API.
Supports both the mock delivery service (development) and DoorDash (production).

Endpoints:
    - GET  /api/carts/{session_id}: Cart snapshot
    - POST /api/carts/{session_id}/items: Add a catalog item
    - PATCH/DELETE /api/carts/{session_id}/items/{line_id}: Change or remove a line
    - DELETE /api/carts/{session_id}: Clear the cart
    - POST /api/restaurants/status(es): Open/closed evaluation
    - GET  /api/food-images: Display image lookup
    - GET/PUT /api/locations/{session_id}: Delivery location
    - /api/deliveries/...: Delivery dispatch
    - POST /webhook/doordash: DoorDash status webhook
    - GET  /health: System health check

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Path, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.core.config import get_settings, setup_logging
from storefront.schemas import (
    SESSION_ID_PATTERN,
    AvailabilityResponse,
    CartItemAdd,
    CartQuantityUpdate,
    CartResponse,
    DeliveryCancel,
    DeliveryCreate,
    DeliveryEstimateRequest,
    DeliveryEstimateResponse,
    ErrorResponse,
    FoodImageResponse,
    HealthResponse,
    LocationResponse,
    LocationUpdate,
    ProvidersResponse,
    RestaurantStatusBatchRequest,
    RestaurantStatusBatchResponse,
    RestaurantStatusRequest,
    RestaurantStatusResponse,
)
from storefront.services.cart import CartStore, get_food_image
from storefront.services.delivery import (
    BaseDeliveryService,
    get_available_providers,
    get_delivery_service,
)
from storefront.services.location import LocationStore
from storefront.services.restaurant_status import (
    RestaurantStatusInput,
    WeeklySchedule,
    evaluate_restaurant_status,
)
from storefront.services.storage import BaseKeyValueStorage, get_storage

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    storage = get_storage()
    delivery_service = get_delivery_service()
    logger.info(f"Storage backend: {storage.backend_name}")
    logger.info(f"Delivery Service: {delivery_service.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"Missing production config: {missing}")

    logger.info("Application ready!")

    yield

    logger.info("Shutting down...")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Storefront core for a multi-restaurant food ordering site: session carts, "
        "restaurant open/closed status and delivery dispatch."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def cart_for_session(session_id: str, storage: BaseKeyValueStorage) -> CartStore:
    """Cart persisted under "<cart_storage_key>:<session_id>"."""
    return CartStore(storage, storage_key=f"{settings.cart_storage_key}:{session_id}")


def location_for_session(session_id: str, storage: BaseKeyValueStorage) -> LocationStore:
    return LocationStore(storage, storage_key=f"{settings.location_storage_key}:{session_id}")


def evaluate_request(
    data: RestaurantStatusRequest,
    at: Optional[datetime] = None,
) -> RestaurantStatusResponse:
    """Evaluate one restaurant from an API request body."""
    schedule = None
    if data.operating_hours is not None:
        schedule = WeeklySchedule.from_dict(data.operating_hours.model_dump())

    status_input = RestaurantStatusInput(
        manual_open_flag=data.is_open,
        temporarily_closed=data.is_temporarily_closed,
        schedule=schedule,
        time_zone=data.timezone or settings.default_timezone,
    )
    result = evaluate_restaurant_status(status_input, now=data.at or at)
    return RestaurantStatusResponse.from_result(result, restaurant_id=data.restaurant_id)


def raise_for_delivery_failure(error_code: Optional[str], message: Optional[str]) -> None:
    """Unknown deliveries are 404; every other provider failure is 502."""
    status_code = 404 if error_code == "not_found" else 502
    raise HTTPException(
        status_code=status_code,
        detail=message or "Delivery provider request failed",
    )


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    storage: BaseKeyValueStorage = Depends(get_storage),
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
) -> HealthResponse:
    """Verify storage and the delivery provider are operational."""
    storage_ok = await run_in_threadpool(storage.health_check)
    storage_status = "healthy" if storage_ok else "unhealthy"
    delivery_status = "healthy" if await delivery_service.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [storage_status, delivery_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        storage=storage_status,
        delivery_service=delivery_status,
        environment=settings.env_mode.value,
        timestamp=datetime.now(),
    )


# =============================================================================
# CART ENDPOINTS
# =============================================================================
# Storage calls block on the file lock, so storage-backed routes are plain
# `def` and run in the threadpool.

@app.get(
    "/api/carts/{session_id}",
    response_model=CartResponse,
    tags=["Cart"],
)
def get_cart(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    storage: BaseKeyValueStorage = Depends(get_storage),
) -> CartResponse:
    cart = cart_for_session(session_id, storage)
    return CartResponse.from_state(session_id, cart.state)


@app.post(
    "/api/carts/{session_id}/items",
    response_model=CartResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
    tags=["Cart"],
    summary="Add Item to Cart",
)
def add_cart_item(
    item: CartItemAdd,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    storage: BaseKeyValueStorage = Depends(get_storage),
) -> CartResponse:
    """
    Add one unit of a catalog item.

    An item already in the cart (same menu item and restaurant) has its
    quantity incremented instead of getting a second line.
    """
    cart = cart_for_session(session_id, storage)
    try:
        cart.add_item(
            item.to_catalog_item(),
            restaurant_name=item.restaurant_name,
            price_override=item.price_override,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CartResponse.from_state(session_id, cart.state)


@app.patch(
    "/api/carts/{session_id}/items/{line_id}",
    response_model=CartResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Cart"],
)
def update_cart_item(
    update: CartQuantityUpdate,
    line_id: str,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    storage: BaseKeyValueStorage = Depends(get_storage),
) -> CartResponse:
    """Set a line's quantity; zero or less removes the line."""
    cart = cart_for_session(session_id, storage)
    if cart.get_line(line_id) is None:
        raise HTTPException(status_code=404, detail=f"Cart line {line_id} not found")

    cart.update_quantity(line_id, update.quantity)
    return CartResponse.from_state(session_id, cart.state)


@app.delete(
    "/api/carts/{session_id}/items/{line_id}",
    response_model=CartResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Cart"],
)
def remove_cart_item(
    line_id: str,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    storage: BaseKeyValueStorage = Depends(get_storage),
) -> CartResponse:
    cart = cart_for_session(session_id, storage)
    if cart.get_line(line_id) is None:
        raise HTTPException(status_code=404, detail=f"Cart line {line_id} not found")

    cart.remove_item(line_id)
    return CartResponse.from_state(session_id, cart.state)


@app.delete(
    "/api/carts/{session_id}",
    response_model=CartResponse,
    tags=["Cart"],
)
def clear_cart(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    storage: BaseKeyValueStorage = Depends(get_storage),
) -> CartResponse:
    cart = cart_for_session(session_id, storage)
    cart.clear()
    return CartResponse.from_state(session_id, cart.state)


# =============================================================================
# RESTAURANT STATUS ENDPOINTS
# =============================================================================

@app.post(
    "/api/restaurants/status",
    response_model=RestaurantStatusResponse,
    tags=["Restaurants"],
    summary="Evaluate Restaurant Status",
)
async def restaurant_status(data: RestaurantStatusRequest) -> RestaurantStatusResponse:
    """
    Decide whether a restaurant is open, in its own time zone.

    Closed restaurants carry a reason code and, when outside hours,
    a hint for the next opening.
    """
    return evaluate_request(data)


@app.post(
    "/api/restaurants/statuses",
    response_model=RestaurantStatusBatchResponse,
    tags=["Restaurants"],
)
async def restaurant_statuses(
    data: RestaurantStatusBatchRequest,
) -> RestaurantStatusBatchResponse:
    """Evaluate several restaurants at the same instant."""
    at = data.at or datetime.now().astimezone()
    return RestaurantStatusBatchResponse(
        statuses=[evaluate_request(restaurant, at=at) for restaurant in data.restaurants]
    )


# =============================================================================
# FOOD IMAGE & LOCATION ENDPOINTS
# =============================================================================

@app.get(
    "/api/food-images",
    response_model=FoodImageResponse,
    tags=["Catalog"],
)
async def food_image(name: str = Query(..., min_length=1)) -> FoodImageResponse:
    return FoodImageResponse(name=name, image=get_food_image(name))


@app.get(
    "/api/locations/{session_id}",
    response_model=LocationResponse,
    tags=["Location"],
)
def get_location(
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    storage: BaseKeyValueStorage = Depends(get_storage),
) -> LocationResponse:
    store = location_for_session(session_id, storage)
    return LocationResponse(
        session_id=session_id,
        location=store.location,
        is_default=store.is_default,
    )


@app.put(
    "/api/locations/{session_id}",
    response_model=LocationResponse,
    tags=["Location"],
)
def update_location(
    data: LocationUpdate,
    session_id: str = Path(..., pattern=SESSION_ID_PATTERN),
    storage: BaseKeyValueStorage = Depends(get_storage),
) -> LocationResponse:
    store = location_for_session(session_id, storage)
    store.update(data.location)
    return LocationResponse(
        session_id=session_id,
        location=store.location,
        is_default=store.is_default,
    )


# =============================================================================
# DELIVERY ENDPOINTS
# =============================================================================

@app.post(
    "/api/deliveries",
    status_code=201,
    responses={502: {"model": ErrorResponse}},
    tags=["Delivery"],
    summary="Dispatch Delivery",
)
async def create_delivery(
    data: DeliveryCreate,
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
) -> dict[str, Any]:
    """Ask the configured provider to dispatch a courier for an order."""
    logger.info(f"Dispatching delivery for order {data.order_id}")

    result = await delivery_service.create_delivery(data.to_request())
    if not result.success:
        logger.warning(
            f"Delivery for order {data.order_id} failed: "
            f"{result.error_code} - {result.error_message}"
        )
        raise_for_delivery_failure(result.error_code, result.error_message)

    return result.to_dict()


@app.get(
    "/api/deliveries/providers",
    response_model=ProvidersResponse,
    tags=["Delivery"],
)
async def delivery_providers(
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
) -> ProvidersResponse:
    """List dispatch providers and the one currently active."""
    providers = get_available_providers()
    return ProvidersResponse(
        active=delivery_service.provider_name,
        providers=providers,
        count=len(providers),
    )


@app.post(
    "/api/deliveries/estimate",
    response_model=DeliveryEstimateResponse,
    tags=["Delivery"],
)
async def delivery_estimate(
    data: DeliveryEstimateRequest,
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
) -> DeliveryEstimateResponse:
    estimate = await delivery_service.estimate_delivery_time(
        data.pickup_address.to_address(),
        data.delivery_address.to_address(),
    )
    return DeliveryEstimateResponse(**estimate.to_dict())


@app.get(
    "/api/deliveries/availability/{zip_code}",
    response_model=AvailabilityResponse,
    tags=["Delivery"],
)
async def delivery_availability(
    zip_code: str,
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
) -> AvailabilityResponse:
    return AvailabilityResponse(
        zip_code=zip_code,
        provider=delivery_service.provider_name,
        available=await delivery_service.check_availability(zip_code),
    )


@app.get(
    "/api/deliveries/{delivery_id}",
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    tags=["Delivery"],
)
async def delivery_status(
    delivery_id: str,
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
) -> dict[str, Any]:
    result = await delivery_service.get_delivery_status(delivery_id)
    if not result.success:
        raise_for_delivery_failure(result.error_code, result.error_message)
    return result.to_dict()


@app.post(
    "/api/deliveries/{delivery_id}/cancel",
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    tags=["Delivery"],
)
async def cancel_delivery(
    delivery_id: str,
    data: Optional[DeliveryCancel] = None,
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
) -> dict[str, Any]:
    reason = (data or DeliveryCancel()).reason
    result = await delivery_service.cancel_delivery(delivery_id, reason=reason)
    if not result.success:
        raise_for_delivery_failure(result.error_code, result.error_message)
    return {"success": True, "delivery_id": delivery_id, "provider": result.provider}


@app.post(
    "/webhook/doordash",
    tags=["Delivery"],
    summary="DoorDash Status Webhook",
)
async def doordash_webhook(
    request: Request,
    delivery_service: BaseDeliveryService = Depends(get_delivery_service),
    x_doordash_signature: Optional[str] = Header(None, alias="x-doordash-signature"),
) -> dict[str, Any]:
    """
    Receive delivery status updates pushed by DoorDash.

    The raw body is verified against x-doordash-signature (hex HMAC-SHA256).
    """
    body = await request.body()
    status = await delivery_service.verify_webhook(body, x_doordash_signature or "")
    if status is None:
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    logger.info(f"Delivery webhook: {status.delivery_id} -> {status.status}")
    return {"received": True, "delivery": status.to_dict()}


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )
