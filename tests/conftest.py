import os

# Settings are read at import time by storefront.main; pin a hermetic environment first.
os.environ["ENV_MODE"] = "development"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["DEBUG"] = "false"
os.environ["DEFAULT_TIMEZONE"] = "America/New_York"

import pytest
from fastapi.testclient import TestClient

from storefront.core.config import get_settings
from storefront.services.cart import CatalogItem
from storefront.services.delivery import MockDeliveryService, get_delivery_service, reset_delivery_service
from storefront.services.restaurant_status import WeeklySchedule
from storefront.services.storage import InMemoryStorage, get_storage, reset_storage


@pytest.fixture(autouse=True)
def fresh_caches():
    get_settings.cache_clear()
    reset_storage()
    reset_delivery_service()
    yield
    get_settings.cache_clear()
    reset_storage()
    reset_delivery_service()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def pho():
    return CatalogItem(id="m-pho", name="Pho Bo", price="12.50", restaurant_id="r-saigon")


@pytest.fixture
def pizza():
    return CatalogItem(id="m-marg", name="Margherita Pizza", price="14.99", restaurant_id="r-pappi")


@pytest.fixture
def nine_to_five():
    return WeeklySchedule.uniform("09:00", "17:00")


@pytest.fixture
def delivery_service():
    return MockDeliveryService()


@pytest.fixture
def client(storage, delivery_service):
    from storefront.main import app

    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_delivery_service] = lambda: delivery_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
