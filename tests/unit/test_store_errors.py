"""
Unit tests for driver error translation in the stores.
"""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from carzone.core.exceptions import BookingConflict, ConflictError, PersistenceError
from carzone.models.booking import Booking
from carzone.store.bookings import BookingStore
from carzone.store.payments import PaymentStore

pytestmark = pytest.mark.unit


class DriverError(Exception):
    def __init__(self, message: str, sqlstate: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate


def _integrity_error(message: str, sqlstate: str | None = None) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, DriverError(message, sqlstate))


def test_exclusion_violation_becomes_booking_conflict() -> None:
    car_id = uuid.uuid4()
    error = _integrity_error("conflicting key value violates exclusion constraint", sqlstate="23P01")

    translated = BookingStore(db=None)._translate_write_error(error, Booking(car_id=car_id))

    assert isinstance(translated, BookingConflict)
    assert translated.status_code == 409
    assert str(car_id) in translated.detail


def test_exclusion_violation_matched_by_constraint_name() -> None:
    error = _integrity_error('violates exclusion constraint "ex_bookings_active_window"')

    assert isinstance(BookingStore(db=None)._translate_write_error(error), BookingConflict)


def test_other_booking_integrity_error_is_persistence_error() -> None:
    error = _integrity_error("null value in column", sqlstate="23502")

    translated = BookingStore(db=None)._translate_write_error(error)

    assert type(translated) is PersistenceError
    assert translated.status_code == 500


@pytest.mark.parametrize(
    "message",
    [
        'duplicate key value violates unique constraint "uq_payments_booking_completed"',
        "UNIQUE constraint failed: payments.booking_id",
    ],
)
def test_completed_payment_violation_becomes_conflict(message: str) -> None:
    translated = PaymentStore(db=None)._translate_write_error(_integrity_error(message, sqlstate="23505"))

    assert isinstance(translated, ConflictError)
    assert translated.status_code == 409


def test_other_payment_errors_are_persistence_errors() -> None:
    duplicate_order = _integrity_error("UNIQUE constraint failed: payments.gateway_order_id")
    lost_connection = OperationalError("UPDATE ...", {}, DriverError("server closed the connection"))

    store = PaymentStore(db=None)

    assert type(store._translate_write_error(duplicate_order)) is PersistenceError
    assert type(store._translate_write_error(lost_connection)) is PersistenceError
