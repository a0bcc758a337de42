"""Database models."""

from carzone.models.audit import AuditLog
from carzone.models.booking import Booking
from carzone.models.car import Car
from carzone.models.enums import BookingStatus, BookingType, PaymentMethod, PaymentStatus
from carzone.models.payment import Payment

__all__ = [
    # Car
    "Car",
    # Booking
    "Booking",
    "BookingStatus",
    "BookingType",
    # Payment
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    # Audit
    "AuditLog",
]
