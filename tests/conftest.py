"""Shared fixtures: in-memory SQLite database, cars and a fake gateway."""

from __future__ import annotations

import os

# Must be set before carzone.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import carzone.models  # noqa: F401
from carzone.database import Base
from carzone.models.car import Car
from tests.support import FakeGateway


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def customer_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def make_car(db: AsyncSession, owner_id: uuid.UUID) -> Callable[..., Awaitable[Car]]:
    """Factory that persists a car owned by ``owner_id``."""

    async def _make(**overrides: Any) -> Car:
        values: dict[str, Any] = {
            "owner_id": owner_id,
            "name": "City Hatch",
            "brand": "Maruti",
            "model": "Swift",
            "year": 2022,
            "rental_price_daily": Decimal("100.00"),
            "sale_price": Decimal("650000.00"),
            "is_available": True,
        }
        values.update(overrides)
        car = Car(**values)
        db.add(car)
        await db.commit()
        return car

    return _make


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
