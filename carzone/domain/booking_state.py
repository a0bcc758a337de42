"""Booking state machine."""

from carzone.core.exceptions import ConflictError, InvalidTransition, ValidationError
from carzone.models.enums import BookingStatus

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

DELETABLE_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CANCELLED})


def parse_booking_status(value: str) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid booking status: {value!r}") from None


def assert_booking_transition(current: str, target: str) -> BookingStatus:
    """Validate ``current → target`` and return the parsed target status."""
    current_status = parse_booking_status(current)
    target_status = parse_booking_status(target)
    if target_status not in BOOKING_TRANSITIONS[current_status]:
        raise InvalidTransition("booking", current_status.value, target_status.value)
    return target_status


def assert_booking_deletable(current: str) -> None:
    current_status = parse_booking_status(current)
    if current_status not in DELETABLE_STATUSES:
        raise ConflictError(
            f"Only pending or cancelled bookings can be deleted (current status: {current_status.value})",
            current=current_status.value,
        )
