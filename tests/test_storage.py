import json

import pytest

from storefront.core.config import StorageBackend, get_settings
from storefront.services.storage import (
    FileStorage,
    InMemoryStorage,
    StorageError,
    get_storage,
    reset_storage,
)


class TestInMemoryStorage:
    def test_set_get_remove(self):
        storage = InMemoryStorage()
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"

        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_remove_missing_key(self):
        InMemoryStorage().remove_item("missing")

    def test_quota(self):
        storage = InMemoryStorage(quota_bytes=8)
        storage.set_item("a", "1234")
        with pytest.raises(StorageError):
            storage.set_item("b", "56789")
        assert storage.get_item("b") is None

    def test_overwrite_does_not_count_old_value(self):
        storage = InMemoryStorage(quota_bytes=5)
        storage.set_item("a", "12345")
        storage.set_item("a", "54321")
        assert storage.get_item("a") == "54321"

    def test_fail_writes(self):
        storage = InMemoryStorage(initial={"k": "v"}, fail_writes=True)
        with pytest.raises(StorageError):
            storage.set_item("k", "w")
        assert storage.get_item("k") == "v"
        assert not storage.health_check()

    def test_keys(self):
        storage = InMemoryStorage({"a": "1", "b": "2"})
        assert sorted(storage.keys()) == ["a", "b"]


class TestFileStorage:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "data" / "store.json"
        storage = FileStorage(path)

        storage.set_item("cart", "[]")
        storage.set_item("location", "12 Main St")

        assert FileStorage(path).get_item("location") == "12 Main St"
        assert json.loads(path.read_text()) == {"cart": "[]", "location": "12 Main St"}

    def test_missing_file_reads_as_empty(self, tmp_path):
        assert FileStorage(tmp_path / "nope.json").get_item("k") is None

    def test_remove_item(self, tmp_path):
        storage = FileStorage(tmp_path / "store.json")
        storage.set_item("k", "v")
        storage.remove_item("k")
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_malformed_document_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{broken")
        storage = FileStorage(path)

        assert storage.get_item("k") is None
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"

    def test_non_string_values_are_ignored(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"good": "x", "bad": 3}))
        storage = FileStorage(path)
        assert storage.get_item("good") == "x"
        assert storage.get_item("bad") is None

    def test_health_check(self, tmp_path):
        assert FileStorage(tmp_path / "store.json").health_check()


class TestFactory:
    def test_memory_backend_from_settings(self):
        assert isinstance(get_storage(), InMemoryStorage)
        assert get_storage() is get_storage()

    def test_file_backend_from_settings(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STORAGE_BACKEND", "file")
        monkeypatch.setenv("DATA_DIRECTORY", str(tmp_path))
        get_settings.cache_clear()
        reset_storage()

        storage = get_storage()

        assert get_settings().storage_backend == StorageBackend.FILE
        assert isinstance(storage, FileStorage)
        assert storage.path == tmp_path / "storefront.json"
