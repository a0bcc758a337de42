"""Razorpay payment gateway adapter.

Documentation: https://razorpay.com/docs/api/orders/
"""

import logging

import httpx

from carzone.config import settings
from carzone.core.exceptions import ExternalServiceError, ValidationError
from carzone.gateways.base import MAX_RECEIPT_LENGTH, GatewayOrder, GatewayType, PaymentGateway

logger = logging.getLogger(__name__)


class RazorpayGateway(PaymentGateway):
    """Razorpay orders API client."""

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._key_id = key_id if key_id is not None else settings.razorpay_key_id
        self.key_secret = key_secret if key_secret is not None else settings.razorpay_key_secret
        self.base_url = (base_url or settings.razorpay_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.gateway_timeout_seconds
        self._transport = transport

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.RAZORPAY

    @property
    def key_id(self) -> str | None:
        return self._key_id

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
    ) -> GatewayOrder:
        """Create a Razorpay order."""
        if not self._key_id or not self.key_secret:
            raise ExternalServiceError("razorpay", "credentials not configured")

        if len(receipt) > MAX_RECEIPT_LENGTH:
            raise ValidationError(f"Receipt exceeds {MAX_RECEIPT_LENGTH} characters: {receipt!r}")

        payload = {"amount": amount, "currency": currency, "receipt": receipt}

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self._key_id, self.key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post("/v1/orders", json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Razorpay order request timed out: receipt={receipt}")
            raise ExternalServiceError("razorpay", "request timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Razorpay order request failed: {e}")
            raise ExternalServiceError("razorpay", str(e)) from e

        if response.status_code != 200:
            logger.error(
                f"Razorpay rejected order: status={response.status_code} body={response.text}"
            )
            raise ExternalServiceError(
                "razorpay", f"order creation returned {response.status_code}"
            )

        try:
            data = response.json()
            order = GatewayOrder(
                id=data["id"],
                amount=int(data.get("amount", amount)),
                currency=data.get("currency", currency),
                receipt=data.get("receipt", receipt),
                status=data.get("status", "created"),
                raw_response=data,
            )
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalServiceError("razorpay", "malformed order response") from e

        logger.info(f"Razorpay order created: id={order.id} amount={order.amount} {order.currency}")
        return order
