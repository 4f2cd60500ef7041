"""
Razorpay payment gateway client.

Talks to the Razorpay REST API over httpx: create an order, fetch an
order, fetch a payment. Connection failures are retried by the
transport; anything still failing becomes PaymentGatewayError.
"""

import logging
from typing import Any, Optional

import httpx

from .exceptions import PaymentGatewayError
from .models import ProviderOrder, ProviderPayment

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.razorpay.com/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 3


class RazorpayGateway:
    """
    Async Razorpay client.

    One AsyncClient is kept for the life of the app and closed from the
    app lifespan via aclose().

    Args:
        key_id: Public key id (also handed to the checkout widget)
        key_secret: Secret key, used for HTTP basic auth and signatures
        api_url: API base URL
        timeout: Per-request timeout in seconds
        retries: Connection retries done by the transport
        transport: Override the transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._key_id = key_id
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            auth=(key_id, key_secret),
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=retries),
            headers={"Content-Type": "application/json"},
        )

    @property
    def key_id(self) -> str:
        return self._key_id

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, Any],
    ) -> ProviderOrder:
        """
        Create an order.

        Args:
            amount: Amount in minor units
            currency: ISO currency code
            receipt: Merchant receipt id (max 40 chars)
            notes: Free-form notes; ``userId`` ties the order to a user
        """
        data = await self._request(
            "POST",
            "/orders",
            json={
                "amount": amount,
                "currency": currency,
                "receipt": receipt,
                "notes": notes,
            },
        )
        return ProviderOrder(**data)

    async def fetch_order(self, order_id: str) -> ProviderOrder:
        data = await self._request("GET", f"/orders/{order_id}")
        # Razorpay returns [] rather than {} for an order without notes
        if not isinstance(data.get("notes"), dict):
            data["notes"] = {}
        return ProviderOrder(**data)

    async def fetch_payment(self, payment_id: str) -> ProviderPayment:
        data = await self._request("GET", f"/payments/{payment_id}")
        return ProviderPayment(**data)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Razorpay {method} {path} returned {e.response.status_code}")
            raise PaymentGatewayError(
                "Payment provider rejected the request",
                status_code=e.response.status_code,
            )
        except httpx.HTTPError as e:
            logger.error(f"Razorpay {method} {path} failed: {e}")
            raise PaymentGatewayError("Payment provider is unavailable")
