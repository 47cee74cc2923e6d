import pytest

from storefront.services.location import LocationStore
from storefront.services.storage import InMemoryStorage


def test_defaults_when_nothing_stored(storage):
    store = LocationStore(storage)
    assert store.location == "123 West Row St, Los Angeles, CA"
    assert store.is_default


def test_update_persists(storage):
    store = LocationStore(storage, storage_key="loc")
    store.update("  350 Fifth Avenue, New York, NY ")

    assert store.location == "350 Fifth Avenue, New York, NY"
    assert not store.is_default
    assert LocationStore(storage, storage_key="loc").location == "350 Fifth Avenue, New York, NY"


@pytest.mark.parametrize("value", ["", "   "])
def test_blank_location_rejected(storage, value):
    store = LocationStore(storage)
    with pytest.raises(ValueError):
        store.update(value)
    assert store.is_default


def test_blank_stored_value_falls_back(storage):
    storage.set_item("loc", "  ")
    assert LocationStore(storage, storage_key="loc", default="HQ").location == "HQ"


def test_write_failure_keeps_value_in_memory():
    store = LocationStore(InMemoryStorage(fail_writes=True))
    assert store.update("1 Market St") == "1 Market St"
    assert store.location == "1 Market St"
