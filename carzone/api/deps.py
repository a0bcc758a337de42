"""API dependencies for service wiring."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carzone.config import Settings, get_settings
from carzone.database import get_db
from carzone.gateways.base import PaymentGateway
from carzone.gateways.razorpay import RazorpayGateway
from carzone.services.booking_service import BookingService
from carzone.services.car_service import CarService
from carzone.services.payment_service import PaymentService

__all__ = [
    "get_db",
    "get_booking_service",
    "get_car_service",
    "get_gateway",
    "get_payment_service",
]


async def get_booking_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingService:
    return BookingService(db)


def get_gateway(
    settings: Annotated[Settings, Depends(get_settings)],
) -> PaymentGateway:
    """Gateway client built from the configured Razorpay credentials."""
    return RazorpayGateway(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        base_url=settings.razorpay_base_url,
        timeout=settings.gateway_timeout_seconds,
    )


async def get_payment_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[PaymentGateway, Depends(get_gateway)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PaymentService:
    return PaymentService(
        db,
        gateway=gateway,
        signing_secret=settings.razorpay_key_secret or "",
        allow_test_signatures=settings.allow_test_signatures,
        currency=settings.payment_currency,
    )


async def get_car_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CarService:
    return CarService(db)
