import logging

import pytest
from pydantic import ValidationError

from storefront.core.config import (
    EnvironmentMode,
    Settings,
    StorageBackend,
    get_settings,
    setup_logging,
)


def test_test_environment():
    settings = get_settings()
    assert settings.env_mode == EnvironmentMode.DEVELOPMENT
    assert settings.is_development
    assert not settings.use_real_services
    assert settings.storage_backend == StorageBackend.MEMORY
    assert settings.status_refresh_seconds == 60.0
    assert settings.validate_production_config() == []


def test_modes_are_case_insensitive(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "STAGING")
    settings = Settings()
    assert settings.is_staging
    assert settings.use_real_services


def test_invalid_mode(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "chaos")
    with pytest.raises(ValidationError):
        Settings()


def test_invalid_storage_backend(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "floppy")
    with pytest.raises(ValidationError):
        Settings()


def test_production_lists_missing_doordash_credentials(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "production")
    monkeypatch.setenv("DOORDASH_KEY_ID", "key")
    settings = Settings()

    assert settings.is_production
    assert settings.validate_production_config() == [
        "DOORDASH_DEVELOPER_ID",
        "DOORDASH_SIGNING_SECRET",
        "DOORDASH_WEBHOOK_SECRET",
    ]


def test_uber_needs_no_credentials(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "production")
    monkeypatch.setenv("DELIVERY_PROVIDER", "uber")
    assert Settings().validate_production_config() == []


def test_zip_codes_list(monkeypatch):
    monkeypatch.setenv("DOORDASH_SUPPORTED_ZIP_CODES", " 94103, 94107 ,,")
    assert Settings().doordash_zip_codes_list == ["94103", "94107"]


@pytest.mark.parametrize("env, base_url, sandbox", [
    ("sandbox", "https://openapi.doordash.com", True),
    ("production", "https://openapi-sandbox.doordash.com", True),
    ("production", "https://openapi.doordash.com", False),
])
def test_doordash_sandbox_detection(monkeypatch, env, base_url, sandbox):
    monkeypatch.setenv("DOORDASH_ENV", env)
    monkeypatch.setenv("DOORDASH_BASE_URL", base_url)
    assert Settings().doordash_is_sandbox is sandbox


def test_setup_logging_returns_package_logger():
    logger = setup_logging()
    assert logger.name == "storefront"
    assert logging.getLogger("httpx").level == logging.WARNING
