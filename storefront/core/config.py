"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses the mock delivery service (no API keys needed)
    - STAGING: Uses the configured delivery provider against sandbox endpoints
    - PRODUCTION: Uses the configured delivery provider against live endpoints

The ENV_MODE variable controls which services are instantiated throughout
the application. STORAGE_BACKEND independently selects where carts and
delivery locations are persisted.

Usage:
    from storefront.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Mock delivery service
    else:
        # DoorDash / Uber

Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with mock services
        PRODUCTION: Live environment with real API integrations
        STAGING: Pre-production testing with real APIs but sandbox keys
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class StorageBackend(str, Enum):
    """Where cart and location state is persisted."""
    MEMORY = "memory"
    FILE = "file"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Sensitive values (signing secrets) should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Storage
        storage_backend: memory or file
        data_directory: Directory holding the storage document
        cart_storage_key: Key under which the cart is serialized
        location_storage_key: Key under which the delivery location is kept

        # Restaurant status
        default_timezone: Zone used when a restaurant does not specify one
        status_refresh_seconds: Re-evaluation cadence of the status monitor

        # Delivery
        delivery_provider: doordash or uber (ignored in development)
        doordash_*: DoorDash Drive credentials and endpoint
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="West Row Kitchen Storefront",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # STORAGE
    # ==========================================================================

    storage_backend: StorageBackend = Field(
        default=StorageBackend.FILE,
        description="Key-value storage backend (memory or file)"
    )
    data_directory: str = Field(
        default="data",
        description="Directory for data files"
    )
    storage_filename: str = Field(
        default="storefront.json",
        description="File holding the persisted key-value document"
    )
    storage_lock_timeout: int = Field(
        default=10,
        description="Seconds to wait for the storage file lock"
    )
    cart_storage_key: str = Field(
        default="west-row-kitchen-cart",
        description="Storage key for the serialized cart"
    )
    location_storage_key: str = Field(
        default="wrk_delivery_location",
        description="Storage key for the delivery location"
    )
    default_location: str = Field(
        default="123 West Row St, Los Angeles, CA",
        description="Delivery location used until the customer picks one"
    )

    # ==========================================================================
    # RESTAURANT STATUS
    # ==========================================================================

    default_timezone: str = Field(
        default="America/New_York",
        description="IANA time zone for restaurants without one"
    )
    status_refresh_seconds: float = Field(
        default=60.0,
        description="Seconds between status monitor re-evaluations"
    )

    # ==========================================================================
    # DELIVERY
    # ==========================================================================

    delivery_provider: str = Field(
        default="doordash",
        description="Delivery provider outside development (doordash or uber)"
    )
    http_timeout_seconds: float = Field(
        default=15.0,
        description="Timeout for outbound delivery API calls"
    )
    pickup_business_name: str = Field(
        default="West Row Kitchen",
        description="Business name sent as the pickup location"
    )
    pickup_phone_number: str = Field(
        default="+16505555555",
        description="Phone number sent as the pickup contact"
    )

    # ==========================================================================
    # DOORDASH DRIVE
    # ==========================================================================

    doordash_developer_id: Optional[str] = Field(
        default=None,
        description="DoorDash developer ID (JWT issuer)"
    )
    doordash_key_id: Optional[str] = Field(
        default=None,
        description="DoorDash access key ID (JWT kid)"
    )
    doordash_signing_secret: Optional[str] = Field(
        default=None,
        description="Base64-encoded DoorDash signing secret"
    )
    doordash_base_url: str = Field(
        default="https://openapi.doordash.com",
        description="DoorDash API base URL"
    )
    doordash_env: str = Field(
        default="production",
        description="DoorDash environment (sandbox or production)"
    )
    doordash_webhook_secret: Optional[str] = Field(
        default=None,
        description="Secret used to verify DoorDash webhook signatures"
    )
    doordash_supported_zip_codes: str = Field(
        default="10001,10002,10003,90210,90211,90212,60601,60602,60603",
        description="Comma-separated zip codes DoorDash delivers to"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("storage_backend", mode="before")
    @classmethod
    def validate_storage_backend(cls, v: str) -> StorageBackend:
        """Convert string to StorageBackend enum."""
        if isinstance(v, StorageBackend):
            return v
        try:
            return StorageBackend(v.lower())
        except ValueError:
            valid = [e.value for e in StorageBackend]
            raise ValueError(f"Invalid storage_backend. Must be one of: {valid}")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def is_staging(self) -> bool:
        """Check if running in staging mode."""
        return self.env_mode == EnvironmentMode.STAGING

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def doordash_zip_codes_list(self) -> list[str]:
        """Get DoorDash zip codes as a list."""
        return [z.strip() for z in self.doordash_supported_zip_codes.split(",") if z.strip()]

    @property
    def doordash_is_sandbox(self) -> bool:
        """DoorDash sandbox is selected by env name or by the base URL."""
        return (
            self.doordash_env.lower() == "sandbox"
            or "sandbox" in self.doordash_base_url.lower()
        )

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services and self.delivery_provider.lower() == "doordash":
            if not self.doordash_developer_id:
                missing.append("DOORDASH_DEVELOPER_ID")
            if not self.doordash_key_id:
                missing.append("DOORDASH_KEY_ID")
            if not self.doordash_signing_secret:
                missing.append("DOORDASH_SIGNING_SECRET")
            if not self.doordash_webhook_secret:
                missing.append("DOORDASH_WEBHOOK_SECRET")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process; call ``get_settings.cache_clear()``
    after changing the environment (tests do this).

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("filelock").setLevel(logging.WARNING)

    return logging.getLogger("storefront")

