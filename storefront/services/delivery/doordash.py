"""
DoorDash Drive Delivery Service Implementation

Production implementation against the DoorDash Drive v2 REST API.
Used when ENV_MODE=production or ENV_MODE=staging with DELIVERY_PROVIDER=doordash.

Requirements:
    - DOORDASH_DEVELOPER_ID, DOORDASH_KEY_ID, DOORDASH_SIGNING_SECRET
    - DOORDASH_WEBHOOK_SECRET for webhook verification

Authentication:
    Every request carries a short-lived HS256 JWT (5 minutes) signed with
    the base64-decoded signing secret, with headers dd-ver=DD-JWT-V1 and kid.

Sandbox:
    Against the sandbox, pickup and dropoff details are replaced by
    DoorDash's test addresses and phone numbers.

Version: 1.0.0
"""

import base64
import hashlib
import hmac
import json
import logging
import time
from dataclasses import replace
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import httpx
from jose import jwt

from storefront.core.config import get_settings
from storefront.services.delivery.base import (
    Address,
    BaseDeliveryService,
    CancellationResult,
    DeliveryRequest,
    DeliveryResult,
    DeliveryStatusResult,
    DriverInfo,
)

logger = logging.getLogger(__name__)

TOKEN_TTL_SECONDS = 300

SANDBOX_PICKUP = Address(
    street="901 Market Street",
    city="San Francisco",
    state="CA",
    zip_code="94103",
)
SANDBOX_DROPOFF = Address(
    street="185 Berry Street",
    city="San Francisco",
    state="CA",
    zip_code="94107",
)
SANDBOX_PICKUP_PHONE = "+14155552671"
SANDBOX_DROPOFF_PHONE = "+14155552672"


def _decode_secret(secret: str) -> bytes:
    """Signing secrets are base64 (url-safe or standard), often unpadded."""
    padded = secret + "=" * (-len(secret) % 4)
    return base64.urlsafe_b64decode(padded)


def _to_cents(amount: float) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class DoorDashDeliveryService(BaseDeliveryService):
    """
    DoorDash Drive delivery provider.

    Example:
        >>> service = DoorDashDeliveryService()
        >>> result = await service.create_delivery(request)
        >>> result.tracking_url
        'https://track.doordash.com/...'
    """

    def __init__(
        self,
        developer_id: Optional[str] = None,
        key_id: Optional[str] = None,
        signing_secret: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        sandbox: Optional[bool] = None,
        timeout: Optional[float] = None,
        supported_zip_codes: Optional[list[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client, filling unset arguments from settings.

        Args:
            transport: Optional httpx transport (tests pass a MockTransport)

        Raises:
            ValueError: If any of the three JWT credentials is missing
        """
        settings = get_settings()

        self.developer_id = developer_id or settings.doordash_developer_id
        self.key_id = key_id or settings.doordash_key_id
        self.signing_secret = signing_secret or settings.doordash_signing_secret
        self.webhook_secret = webhook_secret or settings.doordash_webhook_secret
        self.base_url = (base_url or settings.doordash_base_url).rstrip("/")
        self.sandbox = settings.doordash_is_sandbox if sandbox is None else sandbox
        self.timeout = timeout or settings.http_timeout_seconds
        self.supported_zip_codes = (
            supported_zip_codes
            if supported_zip_codes is not None
            else settings.doordash_zip_codes_list
        )
        self.pickup_business_name = settings.pickup_business_name
        self.pickup_phone_number = settings.pickup_phone_number
        self._transport = transport

        if not (self.developer_id and self.key_id and self.signing_secret):
            raise ValueError(
                "DOORDASH_DEVELOPER_ID, DOORDASH_KEY_ID and DOORDASH_SIGNING_SECRET "
                "are required for the DoorDash delivery provider."
            )

        logger.info(
            f"DoorDashDeliveryService initialized "
            f"(base_url={self.base_url}, sandbox={self.sandbox})"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "doordash"

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    def generate_token(self) -> str:
        """Signed JWT for the Authorization header."""
        issued_at = int(time.time())
        claims = {
            "aud": "doordash",
            "iss": self.developer_id,
            "kid": self.key_id,
            "iat": issued_at,
            "exp": issued_at + TOKEN_TTL_SECONDS,
        }
        return jwt.encode(
            claims,
            _decode_secret(self.signing_secret),
            algorithm="HS256",
            headers={"dd-ver": "DD-JWT-V1", "kid": self.key_id},
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.generate_token()}",
                "Content-Type": "application/json",
            },
        )

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[dict] = None,
    ) -> dict:
        """
        Send one request and return the decoded JSON body.

        Raises:
            httpx.HTTPStatusError: Non-2xx response
            httpx.RequestError: Transport failure (includes timeouts)
            ValueError: Body is not a JSON object
        """
        async with self._client() as client:
            response = await client.request(method, path, json=payload)
            response.raise_for_status()
            if not response.content:
                return {}
            data = response.json()

        if not isinstance(data, dict):
            raise ValueError("Unexpected DoorDash response body")
        return data

    @staticmethod
    def _describe_error(error: Exception) -> tuple[str, str]:
        """Map a request exception to (error_code, error_message)."""
        if isinstance(error, httpx.TimeoutException):
            return "timeout", "DoorDash request timed out"
        if isinstance(error, httpx.HTTPStatusError):
            message = error.response.reason_phrase or "Request failed"
            try:
                body = error.response.json()
                if isinstance(body, dict) and body.get("message"):
                    message = str(body["message"])
            except ValueError:
                pass
            status_code = error.response.status_code
            code = "not_found" if status_code == 404 else "api_error"
            return code, f"DoorDash API error ({status_code}): {message}"
        if isinstance(error, httpx.RequestError):
            return "transport_error", f"Could not reach DoorDash: {error}"
        return "invalid_response", str(error)

    @staticmethod
    def _parse_driver(data: dict) -> Optional[DriverInfo]:
        driver = data.get("driver")
        if isinstance(driver, dict):
            return DriverInfo(
                name=driver.get("name"),
                phone=driver.get("phone"),
                vehicle_info=driver.get("vehicle_info"),
            )
        if data.get("dasher_name"):
            vehicle = " ".join(
                part for part in [data.get("dasher_vehicle_make"), data.get("dasher_vehicle_model")]
                if part
            )
            return DriverInfo(
                name=data.get("dasher_name"),
                phone=data.get("dasher_dropoff_phone_number"),
                vehicle_info=vehicle or None,
            )
        return None

    # =========================================================================
    # Deliveries
    # =========================================================================

    def _apply_sandbox(self, request: DeliveryRequest) -> DeliveryRequest:
        return replace(
            request,
            pickup_address=SANDBOX_PICKUP,
            delivery_address=SANDBOX_DROPOFF,
            pickup_address_line=None,
            dropoff_address_line=None,
            pickup_phone=SANDBOX_PICKUP_PHONE,
            dropoff_phone=SANDBOX_DROPOFF_PHONE,
            pickup_business_name="Test Kitchen",
            dropoff_business_name="Test Customer",
        )

    def build_payload(self, request: DeliveryRequest) -> dict[str, Any]:
        """Drive v2 create-delivery body for a request."""
        payload: dict[str, Any] = {
            "external_delivery_id": request.order_id,
            "pickup_address": request.pickup_address_line or request.pickup_address.to_line(),
            "pickup_business_name": request.pickup_business_name or self.pickup_business_name,
            "pickup_phone_number": request.pickup_phone or self.pickup_phone_number,
            "pickup_instructions": request.pickup_address.instructions or "",
            "dropoff_address": request.dropoff_address_line or request.delivery_address.to_line(),
            "dropoff_business_name": request.dropoff_business_name or "Customer",
            "dropoff_phone_number": request.dropoff_phone or self.pickup_phone_number,
            "dropoff_instructions": (
                request.delivery_address.instructions or request.special_instructions or ""
            ),
            "order_value": _to_cents(request.total_amount),
        }
        if request.estimated_pickup_time:
            payload["pickup_time"] = request.estimated_pickup_time
        if request.estimated_delivery_time:
            payload["dropoff_time"] = request.estimated_delivery_time
        return payload

    async def create_delivery(self, request: DeliveryRequest) -> DeliveryResult:
        start_time = datetime.now()

        if self.sandbox:
            request = self._apply_sandbox(request)
        payload = self.build_payload(request)

        logger.info(
            f"DoorDash: Creating delivery for order {request.order_id} "
            f"(order_value={payload['order_value']})"
        )

        try:
            data = await self._request("POST", "/drive/v2/deliveries", payload)
        except (httpx.HTTPError, ValueError) as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            error_code, message = self._describe_error(e)
            logger.error(f"DoorDash: Delivery creation failed - {message}")
            return DeliveryResult(
                success=False,
                provider=self.provider_name,
                error_message=message,
                error_code=error_code,
                response_time_ms=elapsed_ms,
            )

        elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
        delivery_id = data.get("external_delivery_id") or request.order_id

        logger.info(
            f"DoorDash: Delivery created - {delivery_id} - "
            f"status={data.get('delivery_status')}"
        )

        return DeliveryResult(
            success=True,
            delivery_id=delivery_id,
            provider=self.provider_name,
            status=data.get("delivery_status"),
            estimated_pickup_time=data.get("pickup_time_estimated"),
            estimated_delivery_time=data.get("dropoff_time_estimated"),
            driver=self._parse_driver(data),
            tracking_url=data.get("tracking_url"),
            response_time_ms=elapsed_ms,
        )

    async def get_delivery_status(self, delivery_id: str) -> DeliveryStatusResult:
        try:
            data = await self._request("GET", f"/drive/v2/deliveries/{delivery_id}")
        except (httpx.HTTPError, ValueError) as e:
            error_code, message = self._describe_error(e)
            logger.error(f"DoorDash: Status lookup for {delivery_id} failed - {message}")
            return DeliveryStatusResult(
                success=False,
                delivery_id=delivery_id,
                provider=self.provider_name,
                error_message=message,
                error_code=error_code,
            )

        return self._status_from_payload(data, fallback_id=delivery_id)

    def _status_from_payload(
        self,
        data: dict,
        fallback_id: Optional[str] = None,
    ) -> DeliveryStatusResult:
        """Deliveries are addressed by external_delivery_id in every Drive v2 path."""
        return DeliveryStatusResult(
            success=True,
            delivery_id=(
                data.get("external_delivery_id") or data.get("delivery_id") or fallback_id
            ),
            order_id=data.get("external_delivery_id"),
            provider=self.provider_name,
            status=data.get("delivery_status") or data.get("status") or data.get("event_name"),
            timestamp=data.get("updated_at") or data.get("created_at"),
            driver=self._parse_driver(data),
            tracking_url=data.get("tracking_url"),
            estimated_delivery_time=data.get("dropoff_time") or data.get("dropoff_time_estimated"),
        )

    async def cancel_delivery(
        self,
        delivery_id: str,
        reason: str = "Customer requested cancellation",
    ) -> CancellationResult:
        logger.info(f"DoorDash: Cancelling delivery {delivery_id} ({reason})")

        try:
            await self._request(
                "POST",
                f"/drive/v2/deliveries/{delivery_id}/cancel",
                {"reason": reason},
            )
        except (httpx.HTTPError, ValueError) as e:
            error_code, message = self._describe_error(e)
            logger.error(f"DoorDash: Cancellation of {delivery_id} failed - {message}")
            return CancellationResult(
                success=False,
                delivery_id=delivery_id,
                provider=self.provider_name,
                error_message=message,
                error_code=error_code,
            )

        return CancellationResult(
            success=True,
            delivery_id=delivery_id,
            provider=self.provider_name,
        )

    async def check_availability(self, zip_code: str) -> bool:
        """Coverage comes from DOORDASH_SUPPORTED_ZIP_CODES."""
        return zip_code.strip() in self.supported_zip_codes

    # =========================================================================
    # Webhooks
    # =========================================================================

    def sign_payload(self, payload: bytes) -> str:
        """Hex HMAC-SHA256 of a webhook body under the webhook secret."""
        return hmac.new(
            (self.webhook_secret or "").encode("utf-8"),
            payload,
            hashlib.sha256,
        ).hexdigest()

    async def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> Optional[DeliveryStatusResult]:
        if not self.webhook_secret:
            logger.warning("DoorDash: Webhook secret not configured")
            return None

        expected = self.sign_payload(payload).encode("ascii")
        if not signature or not hmac.compare_digest(
            expected, signature.encode("utf-8", "replace")
        ):
            logger.warning("DoorDash: Webhook signature verification failed")
            return None

        try:
            data = json.loads(payload)
        except ValueError as e:
            logger.error(f"DoorDash: Webhook body is not JSON - {e}")
            return None
        if not isinstance(data, dict):
            return None

        result = self._status_from_payload(data)
        logger.info(
            f"DoorDash: Webhook verified - {result.delivery_id} status={result.status}"
        )
        return result

    async def health_check(self) -> bool:
        """The client is usable when a token can be signed."""
        try:
            self.generate_token()
            return True
        except Exception as e:
            logger.error(f"DoorDash: Health check failed - {e}")
            return False
