import json
from datetime import datetime, timedelta, timezone

import pytest

from storefront.core.config import get_settings
from storefront.services.delivery import (
    Address,
    DeliveryItem,
    DeliveryRequest,
    DoorDashDeliveryService,
    MockDeliveryService,
    get_delivery_service,
    get_available_providers,
    reset_delivery_service,
)


@pytest.fixture
def delivery_request():
    return DeliveryRequest(
        order_id="order-42",
        restaurant_id="r-1",
        customer_id="c-9",
        pickup_address=Address("10 West Row", "Los Angeles", "CA", "90012"),
        delivery_address=Address("350 Fifth Avenue", "New York", "NY", "10001"),
        items=[DeliveryItem("Pho Bo", 2, 12.5)],
        total_amount=25.0,
    )


async def test_create_delivery(delivery_request):
    service = MockDeliveryService()
    result = await service.create_delivery(delivery_request)

    assert result.success
    assert result.delivery_id == "mock_order-42"
    assert result.status == "created"
    assert result.eta == "20 mins"
    assert result.provider == "mock"
    assert result.estimated_pickup_time < result.estimated_delivery_time


async def test_simulated_failure(delivery_request):
    service = MockDeliveryService(failure_rate=1.0)
    result = await service.create_delivery(delivery_request)

    assert not result.success
    assert result.error_code == "service_unavailable"
    assert result.to_dict()["error_message"] == "Failed to trigger mock delivery"


async def test_status_and_cancel(delivery_request):
    service = MockDeliveryService(provider="uber")
    created = await service.create_delivery(delivery_request)

    status = await service.get_delivery_status(created.delivery_id)
    assert status.success
    assert status.status == "created"
    assert status.order_id == "order-42"
    assert status.provider == "uber"

    cancelled = await service.cancel_delivery(created.delivery_id)
    assert cancelled.success
    assert (await service.get_delivery_status(created.delivery_id)).status == "cancelled"


async def test_unknown_delivery():
    service = MockDeliveryService()
    assert (await service.get_delivery_status("nope")).error_code == "not_found"
    assert (await service.cancel_delivery("nope")).error_code == "not_found"


@pytest.mark.parametrize("zip_code, available", [
    ("10001", True),
    ("10001-1234", True),
    ("1000", False),
    ("", False),
])
async def test_availability(zip_code, available):
    assert await MockDeliveryService().check_availability(zip_code) is available


async def test_webhook_updates_known_delivery(delivery_request):
    service = MockDeliveryService()
    created = await service.create_delivery(delivery_request)
    body = json.dumps({"delivery_id": created.delivery_id, "status": "delivered"}).encode()

    status = await service.verify_webhook(body, "")

    assert status.status == "delivered"
    assert (await service.get_delivery_status(created.delivery_id)).status == "delivered"


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]"])
async def test_webhook_rejects_non_objects(body):
    assert await MockDeliveryService().verify_webhook(body, "") is None


async def test_health_check():
    assert await MockDeliveryService().health_check()


async def test_estimate_delivery_time():
    service = MockDeliveryService(provider="uber")
    address = Address("10 West Row", "Los Angeles", "CA", "90012")

    estimate = await service.estimate_delivery_time(address, address)

    pickup = datetime.fromisoformat(estimate.estimated_pickup_time)
    dropoff = datetime.fromisoformat(estimate.estimated_delivery_time)
    assert estimate.provider == "uber"
    assert timedelta(minutes=14) < pickup - datetime.now(timezone.utc) <= timedelta(minutes=15)
    assert dropoff - pickup == timedelta(minutes=30)


class TestFactory:
    def test_development_uses_mock(self):
        service = get_delivery_service()
        assert isinstance(service, MockDeliveryService)
        assert service is get_delivery_service()

    def test_uber_provider(self, monkeypatch):
        monkeypatch.setenv("ENV_MODE", "staging")
        monkeypatch.setenv("DELIVERY_PROVIDER", "uber")
        get_settings.cache_clear()
        reset_delivery_service()

        assert get_delivery_service().provider_name == "uber"

    def test_doordash_provider(self, monkeypatch):
        monkeypatch.setenv("ENV_MODE", "production")
        monkeypatch.setenv("DOORDASH_DEVELOPER_ID", "dev")
        monkeypatch.setenv("DOORDASH_KEY_ID", "key")
        monkeypatch.setenv("DOORDASH_SIGNING_SECRET", "c2VjcmV0")
        get_settings.cache_clear()
        reset_delivery_service()

        assert isinstance(get_delivery_service(), DoorDashDeliveryService)

    def test_doordash_without_credentials_fails(self, monkeypatch):
        monkeypatch.setenv("ENV_MODE", "production")
        get_settings.cache_clear()
        reset_delivery_service()

        with pytest.raises(ValueError):
            get_delivery_service()

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setenv("ENV_MODE", "production")
        monkeypatch.setenv("DELIVERY_PROVIDER", "pigeon")
        get_settings.cache_clear()
        reset_delivery_service()

        with pytest.raises(ValueError):
            get_delivery_service()

    def test_available_providers_in_development(self):
        assert get_available_providers() == ["mock"]

    def test_available_providers_without_doordash_credentials(self, monkeypatch):
        monkeypatch.setenv("ENV_MODE", "production")
        get_settings.cache_clear()

        assert get_available_providers() == ["uber"]

    def test_available_providers_with_doordash_credentials(self, monkeypatch):
        monkeypatch.setenv("ENV_MODE", "staging")
        monkeypatch.setenv("DOORDASH_DEVELOPER_ID", "dev")
        monkeypatch.setenv("DOORDASH_KEY_ID", "key")
        monkeypatch.setenv("DOORDASH_SIGNING_SECRET", "c2VjcmV0")
        get_settings.cache_clear()

        assert get_available_providers() == ["doordash", "uber"]
