"""Booking pricing.

- purchase: the car's fixed sale price
- rental: daily rate * whole days, charged for at least one day
"""

from datetime import datetime, timedelta
from decimal import Decimal

from carzone.core.exceptions import ValidationError
from carzone.models.enums import BookingType

MIN_RENTAL_DAYS = 1


def rental_days(start: datetime, end: datetime) -> int:
    """Whole days between ``start`` and ``end``, floored, minimum one."""
    days = (end - start) // timedelta(days=1)
    return max(days, MIN_RENTAL_DAYS)


def calculate_total_amount(
    booking_type: str | BookingType,
    daily_rate: Decimal | None,
    sale_price: Decimal | None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> Decimal:
    """Calculate the amount owed for a booking.

    Args:
        booking_type: rental or purchase
        daily_rate: Car's daily rental rate
        sale_price: Car's sale price, if it is for sale
        start: Rental start (rental only)
        end: Rental end (rental only)

    Returns:
        Decimal: Total amount in currency units
    """
    if BookingType(booking_type) == BookingType.PURCHASE:
        if sale_price is None:
            raise ValidationError("Sale price not available for this car")
        return Decimal(sale_price)

    if start is None or end is None:
        raise ValidationError("Start and end dates are required for rental bookings")

    if daily_rate is None or daily_rate <= 0:
        raise ValidationError("Invalid daily rental price for this car")

    return Decimal(daily_rate) * rental_days(start, end)
