"""Status and type enumerations shared by models, schemas and services."""

from enum import Enum


class BookingType(str, Enum):
    RENTAL = "rental"
    PURCHASE = "purchase"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    RAZORPAY = "razorpay"
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    NETBANKING = "netbanking"


# Bookings in these states hold their rental window.
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)
