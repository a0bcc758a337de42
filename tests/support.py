"""Test doubles and helpers shared across test modules."""

from __future__ import annotations

from datetime import datetime, timedelta

from carzone.core.exceptions import ExternalServiceError
from carzone.core.security import sign_payment
from carzone.gateways.base import GatewayOrder, GatewayType, PaymentGateway
from carzone.utils.datetime import utc_now

SIGNING_SECRET = "test_key_secret"


class FakeGateway(PaymentGateway):
    """Gateway double that hands out sequential order ids."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.orders: list[GatewayOrder] = []

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.RAZORPAY

    @property
    def key_id(self) -> str | None:
        return "rzp_test_key"

    async def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        if self.fail:
            raise ExternalServiceError("razorpay", "simulated outage")
        order = GatewayOrder(
            id=f"order_{len(self.orders) + 1:04d}",
            amount=amount,
            currency=currency,
            receipt=receipt,
        )
        self.orders.append(order)
        return order


def signed(order_id: str, payment_id: str) -> str:
    """Signature the gateway would send for ``order_id``/``payment_id``."""
    return sign_payment(SIGNING_SECRET, order_id, payment_id)


def future_window(days_from_now: int = 1, length_days: int = 3) -> tuple[datetime, datetime]:
    """Rental window starting at midnight ``days_from_now`` days ahead."""
    start = (utc_now() + timedelta(days=days_from_now)).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=length_days)
