"""Pydantic schemas for API validation."""

from carzone.schemas.booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
)
from carzone.schemas.car import CarCreate, CarResponse, CarUpdate
from carzone.schemas.payment import (
    PaymentCreate,
    PaymentOrderResponse,
    PaymentResponse,
    PaymentStatusUpdate,
    PaymentVerificationRequest,
    RefundRequest,
)

__all__ = [
    # Car
    "CarCreate",
    "CarUpdate",
    "CarResponse",
    # Booking
    "BookingCreate",
    "BookingStatusUpdate",
    "BookingResponse",
    "AvailabilityResponse",
    # Payment
    "PaymentCreate",
    "PaymentVerificationRequest",
    "PaymentStatusUpdate",
    "RefundRequest",
    "PaymentResponse",
    "PaymentOrderResponse",
]
