"""
Unit tests for the Razorpay orders client using httpx.MockTransport.
"""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from carzone.core.exceptions import ExternalServiceError, ValidationError
from carzone.gateways.razorpay import RazorpayGateway

BASE_URL = "https://razorpay.test"


def _gateway(handler, key_id: str = "rzp_test_key", key_secret: str = "rzp_secret") -> RazorpayGateway:
    return RazorpayGateway(
        key_id=key_id,
        key_secret=key_secret,
        base_url=BASE_URL,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.unit
async def test_create_order_success() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "order_ABC123",
                "amount": 30000,
                "currency": "INR",
                "receipt": "bk_12345678_42",
                "status": "created",
            },
        )

    order = await _gateway(handler).create_order(30000, "INR", "bk_12345678_42")

    assert order.id == "order_ABC123"
    assert order.amount == 30000
    assert order.status == "created"
    assert seen["url"] == f"{BASE_URL}/v1/orders"
    assert seen["body"] == {"amount": 30000, "currency": "INR", "receipt": "bk_12345678_42"}
    expected_auth = base64.b64encode(b"rzp_test_key:rzp_secret").decode()
    assert seen["auth"] == f"Basic {expected_auth}"


@pytest.mark.unit
async def test_non_200_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"description": "bad amount"}})

    with pytest.raises(ExternalServiceError, match="returned 400"):
        await _gateway(handler).create_order(30000, "INR", "bk_1")


@pytest.mark.unit
async def test_malformed_body_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"not json")

    with pytest.raises(ExternalServiceError, match="malformed"):
        await _gateway(handler).create_order(30000, "INR", "bk_1")


@pytest.mark.unit
async def test_missing_order_id_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"amount": 30000})

    with pytest.raises(ExternalServiceError):
        await _gateway(handler).create_order(30000, "INR", "bk_1")


@pytest.mark.unit
async def test_timeout_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ExternalServiceError, match="timed out"):
        await _gateway(handler).create_order(30000, "INR", "bk_1")


@pytest.mark.unit
async def test_connection_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExternalServiceError) as exc_info:
        await _gateway(handler).create_order(30000, "INR", "bk_1")

    assert exc_info.value.status_code == 503
    assert exc_info.value.service == "razorpay"


@pytest.mark.unit
async def test_missing_credentials() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ExternalServiceError, match="credentials"):
        await _gateway(handler, key_id="", key_secret="").create_order(30000, "INR", "bk_1")


@pytest.mark.unit
async def test_receipt_too_long() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ValidationError, match="40 characters"):
        await _gateway(handler).create_order(30000, "INR", "x" * 41)
