"""
Integration tests for the HTTP API through httpx.AsyncClient and ASGITransport.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from datetime import timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from carzone.api.deps import get_payment_service
from carzone.database import get_db
from carzone.main import app
from carzone.services.payment_service import PaymentService
from tests.support import SIGNING_SECRET, FakeGateway, future_window, signed

pytestmark = pytest.mark.integration

PREFIX = "/api/v1"


@pytest_asyncio.fixture
async def client(
    session_maker: async_sessionmaker[AsyncSession], gateway: FakeGateway
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def override_payment_service(db: AsyncSession = Depends(get_db)) -> PaymentService:
        return PaymentService(db, gateway=gateway, signing_secret=SIGNING_SECRET)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_service] = override_payment_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _create_car(client: AsyncClient, owner_id: uuid.UUID, **overrides) -> dict:
    payload = {
        "owner_id": str(owner_id),
        "name": "Family SUV",
        "brand": "Mahindra",
        "model": "XUV700",
        "year": 2023,
        "rental_price_daily": "100.00",
        "sale_price": "2100000.00",
    }
    payload.update(overrides)
    response = await client.post(f"{PREFIX}/cars", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


async def _create_rental(client: AsyncClient, car: dict, customer_id: uuid.UUID, start, end):
    return await client.post(
        f"{PREFIX}/bookings",
        json={
            "customer_id": str(customer_id),
            "car_id": car["id"],
            "owner_id": car["owner_id"],
            "booking_type": "rental",
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        },
    )


async def test_health(client: AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


async def test_car_crud(client: AsyncClient, owner_id) -> None:
    car = await _create_car(client, owner_id)

    response = await client.get(f"{PREFIX}/cars/{car['id']}")
    assert response.status_code == 200
    assert response.json()["brand"] == "Mahindra"

    response = await client.get(f"{PREFIX}/cars")
    assert [c["id"] for c in response.json()] == [car["id"]]

    response = await client.get(f"{PREFIX}/cars/{uuid.uuid4()}")
    assert response.status_code == 404


async def test_car_update_delete_and_brand_lookup(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    other = await _create_car(client, owner_id, brand="Tata", name="Compact", model="Nexon")
    url = f"{PREFIX}/cars/{car['id']}"

    response = await client.get(f"{PREFIX}/cars/brand/mahindra")
    assert [c["id"] for c in response.json()] == [car["id"]]
    response = await client.get(f"{PREFIX}/cars", params={"brand": "Tata"})
    assert [c["id"] for c in response.json()] == [other["id"]]

    response = await client.put(url, json={"owner_id": str(uuid.uuid4()), "name": "Taken"})
    assert response.status_code == 403

    response = await client.put(url, json={"owner_id": str(owner_id), "rental_price_daily": "150.00"})
    assert response.status_code == 200
    assert Decimal(response.json()["rental_price_daily"]) == Decimal("150.00")
    assert response.json()["name"] == "Family SUV"

    start, end = future_window()
    assert (await _create_rental(client, car, customer_id, start, end)).status_code == 201
    response = await client.delete(url)
    assert response.status_code == 409

    response = await client.delete(f"{PREFIX}/cars/{other['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == other["id"]
    response = await client.get(f"{PREFIX}/cars/{other['id']}")
    assert response.status_code == 404


async def test_booking_flow_and_conflict(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window(length_days=3)

    response = await _create_rental(client, car, customer_id, start, end)
    assert response.status_code == 201, response.text
    booking = response.json()
    assert booking["status"] == "pending"
    assert Decimal(booking["total_amount"]) == Decimal("300")

    response = await _create_rental(client, car, uuid.uuid4(), start, end)
    assert response.status_code == 409

    response = await client.get(
        f"{PREFIX}/cars/{car['id']}/availability",
        params={"start": start.isoformat(), "end": end.isoformat()},
    )
    assert response.status_code == 200
    assert response.json()["available"] is False
    assert response.json()["conflicting_booking_id"] == booking["id"]

    response = await client.get(
        f"{PREFIX}/cars/{car['id']}/availability",
        params={"start": end.isoformat(), "end": (end + timedelta(days=2)).isoformat()},
    )
    assert response.json()["available"] is True


async def test_owner_mismatch_is_forbidden(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window()

    response = await client.post(
        f"{PREFIX}/bookings",
        json={
            "customer_id": str(customer_id),
            "car_id": car["id"],
            "owner_id": str(uuid.uuid4()),
            "booking_type": "rental",
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
        },
    )

    assert response.status_code == 403


async def test_status_transitions_and_delete(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window()
    booking = (await _create_rental(client, car, customer_id, start, end)).json()
    url = f"{PREFIX}/bookings/{booking['id']}"

    response = await client.patch(f"{url}/status", json={"status": "shipped"})
    assert response.status_code == 422

    response = await client.patch(f"{url}/status", json={"status": "completed"})
    assert response.status_code == 409
    assert "pending to completed" in response.json()["detail"]

    response = await client.patch(f"{url}/status", json={"status": "confirmed"})
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

    response = await client.delete(url)
    assert response.status_code == 409

    await client.patch(f"{url}/status", json={"status": "cancelled"})
    response = await client.delete(url)
    assert response.status_code == 200
    assert response.json()["id"] == booking["id"]

    response = await client.get(url)
    assert response.status_code == 404


async def test_booking_lists(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window()
    booking = (await _create_rental(client, car, customer_id, start, end)).json()

    for path in (
        f"{PREFIX}/bookings",
        f"{PREFIX}/bookings/car/{car['id']}",
        f"{PREFIX}/bookings/customer/{customer_id}",
        f"{PREFIX}/bookings/owner/{owner_id}",
    ):
        response = await client.get(path)
        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [booking["id"]]


async def test_payment_flow(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window(length_days=3)
    booking = (await _create_rental(client, car, customer_id, start, end)).json()

    response = await client.post(
        f"{PREFIX}/payments",
        json={"booking_id": booking["id"], "amount": "300.00", "method": "razorpay"},
    )
    assert response.status_code == 201, response.text
    created = response.json()
    order_id = created["order_id"]
    assert created["amount_minor"] == 30000
    assert created["key_id"] == "rzp_test_key"
    assert created["payment"]["status"] == "pending"

    verification = {
        "razorpay_order_id": order_id,
        "razorpay_payment_id": "pay_001",
        "razorpay_signature": signed(order_id, "pay_001"),
    }
    response = await client.post(f"{PREFIX}/payments/verify", json=verification)
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    # Replay
    response = await client.post(f"{PREFIX}/payments/verify", json=verification)
    assert response.status_code == 200
    assert response.json()["id"] == created["payment"]["id"]

    payment_url = f"{PREFIX}/payments/{created['payment']['id']}"
    response = await client.post(f"{payment_url}/refund", json={"amount": "300.01"})
    assert response.status_code == 422

    response = await client.post(f"{payment_url}/refund", json={"amount": "300.00"})
    assert response.status_code == 200
    assert response.json()["status"] == "refunded"

    response = await client.get(f"{PREFIX}/payments/customer/{customer_id}")
    assert [p["id"] for p in response.json()] == [created["payment"]["id"]]

    response = await client.get(f"{PREFIX}/bookings/{booking['id']}")
    assert response.json()["status"] == "pending"


async def test_tampered_signature_is_rejected(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window()
    booking = (await _create_rental(client, car, customer_id, start, end)).json()
    created = (
        await client.post(
            f"{PREFIX}/payments",
            json={"booking_id": booking["id"], "amount": "100.00", "method": "razorpay"},
        )
    ).json()

    response = await client.post(
        f"{PREFIX}/payments/verify",
        json={
            "razorpay_order_id": created["order_id"],
            "razorpay_payment_id": "pay_001",
            "razorpay_signature": "0" * 64,
        },
    )
    assert response.status_code == 400

    response = await client.get(f"{PREFIX}/payments/{created['payment']['id']}")
    assert response.json()["status"] == "failed"

    response = await client.get(f"{PREFIX}/payments/booking/{booking['id']}")
    assert [p["status"] for p in response.json()] == ["failed"]


async def test_gateway_outage_is_503(client: AsyncClient, gateway: FakeGateway, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window()
    booking = (await _create_rental(client, car, customer_id, start, end)).json()
    gateway.fail = True

    response = await client.post(
        f"{PREFIX}/payments",
        json={"booking_id": booking["id"], "amount": "100.00", "method": "razorpay"},
    )

    assert response.status_code == 503
    response = await client.get(f"{PREFIX}/payments/booking/{booking['id']}")
    assert [p["status"] for p in response.json()] == ["failed"]


async def test_payment_status_update(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window()
    booking = (await _create_rental(client, car, customer_id, start, end)).json()
    created = (
        await client.post(
            f"{PREFIX}/payments",
            json={"booking_id": booking["id"], "amount": "100.00", "method": "cash"},
        )
    ).json()
    assert created["order_id"] is None
    url = f"{PREFIX}/payments/{created['payment']['id']}/status"

    response = await client.patch(url, json={"status": "refunded"})
    assert response.status_code == 409

    response = await client.patch(url, json={"status": "cancelled"})
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    response = await client.get(f"{PREFIX}/payments")
    assert len(response.json()) == 1


async def test_second_completed_payment_is_409(client: AsyncClient, owner_id, customer_id) -> None:
    car = await _create_car(client, owner_id)
    start, end = future_window()
    booking = (await _create_rental(client, car, customer_id, start, end)).json()
    payment_ids = []
    for method in ("cash", "upi"):
        created = (
            await client.post(
                f"{PREFIX}/payments",
                json={"booking_id": booking["id"], "amount": "100.00", "method": method},
            )
        ).json()
        payment_ids.append(created["payment"]["id"])

    first, second = (f"{PREFIX}/payments/{pid}/status" for pid in payment_ids)
    response = await client.patch(first, json={"status": "completed"})
    assert response.status_code == 200

    response = await client.patch(second, json={"status": "completed"})
    assert response.status_code == 409
    assert "already has completed payment" in response.json()["detail"]
