"""Rental window overlap rules.

Windows are half-open ``[start, end)``: a rental ending at 10:00 and the next
starting at 10:00 do not conflict.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from carzone.models.booking import Booking
from carzone.models.enums import ACTIVE_BOOKING_STATUSES, BookingType
from carzone.utils.datetime import ensure_utc


@dataclass(frozen=True)
class ConflictCheck:
    """Outcome of an availability check."""

    conflict: bool
    booking_id: UUID | None = None


NO_CONFLICT = ConflictCheck(conflict=False)


def intervals_overlap(start1: datetime, end1: datetime, start2: datetime, end2: datetime) -> bool:
    return ensure_utc(start1) < ensure_utc(end2) and ensure_utc(end1) > ensure_utc(start2)


def holds_window(booking: Booking) -> bool:
    """Whether the booking blocks its car for its rental window."""
    return (
        booking.booking_type == BookingType.RENTAL.value
        and booking.status in {status.value for status in ACTIVE_BOOKING_STATUSES}
        and booking.start_date is not None
        and booking.end_date is not None
    )


def find_conflict(bookings: Iterable[Booking], start: datetime, end: datetime) -> ConflictCheck:
    """Return the first active rental overlapping ``[start, end)``."""
    for booking in bookings:
        if holds_window(booking) and intervals_overlap(
            start, end, booking.start_date, booking.end_date
        ):
            return ConflictCheck(conflict=True, booking_id=booking.id)
    return NO_CONFLICT
