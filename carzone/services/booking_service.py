"""Booking admission and lifecycle.

A booking is validated, checked against the car's active rentals, priced and
stored as ``pending``. The car row is locked for the duration of the check so
that two requests for the same car cannot both pass it; the PostgreSQL
exclusion constraint on active rental windows backs this up.
"""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from carzone.core.exceptions import (
    AppException,
    AuthorizationMismatch,
    BookingConflict,
    ConflictError,
    PersistenceError,
    StaleStateError,
    ValidationError,
)
from carzone.domain.availability import ConflictCheck, find_conflict
from carzone.domain.booking_state import (
    DELETABLE_STATUSES,
    assert_booking_deletable,
    assert_booking_transition,
)
from carzone.domain.pricing import calculate_total_amount
from carzone.models.booking import Booking
from carzone.models.enums import BookingStatus, BookingType
from carzone.schemas.booking import BookingCreate
from carzone.services.audit_service import audit_service
from carzone.store.bookings import BookingStore
from carzone.store.cars import CarStore
from carzone.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

MIN_RENTAL_DURATION = timedelta(days=1)
# Start dates up to a day in the past are tolerated (client clock skew, time zones)
START_DATE_GRACE = timedelta(days=1)


class BookingService:
    """Service for creating bookings and moving them through their lifecycle."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingStore(db)
        self.cars = CarStore(db)

    # ---- reads ----

    async def get_booking(self, booking_id: UUID) -> Booking:
        return await self.bookings.get(booking_id)

    async def list_bookings(self) -> list[Booking]:
        return await self.bookings.list_all()

    async def list_by_car(self, car_id: UUID) -> list[Booking]:
        return await self.bookings.list_by_car(car_id)

    async def list_by_customer(self, customer_id: UUID) -> list[Booking]:
        return await self.bookings.list_by_customer(customer_id)

    async def list_by_owner(self, owner_id: UUID) -> list[Booking]:
        return await self.bookings.list_by_owner(owner_id)

    # ---- availability ----

    async def check_conflict(self, car_id: UUID, start: datetime, end: datetime) -> ConflictCheck:
        """Check ``[start, end)`` against the car's pending and confirmed rentals.

        Fails closed: if existing bookings cannot be read, the check raises
        ``PersistenceError`` instead of reporting the window as free.
        """
        try:
            existing = await self.bookings.list_active_rentals(car_id)
        except PersistenceError:
            logger.error(f"Conflict check failed for car {car_id}; rejecting booking")
            raise PersistenceError("Failed to check booking conflicts") from None
        return find_conflict(existing, start, end)

    # ---- lifecycle ----

    async def create_booking(self, request: BookingCreate) -> Booking:
        """Validate, check, price and store a new pending booking.

        Any failure after the car is locked rolls the session back, which
        expires every object loaded through it. Callers sharing the session
        must reload earlier results before reading them again.
        """
        start, end = self._validate_request(request)

        try:
            # Row lock serializes concurrent bookings of the same car
            car = await self.cars.get(request.car_id, for_update=True)

            if not car.is_available:
                raise ConflictError(f"Car '{car.id}' is not available for booking")

            if car.owner_id is None or car.owner_id != request.owner_id:
                raise AuthorizationMismatch(
                    f"Owner ID '{request.owner_id}' does not match owner of car '{car.id}'"
                )

            if request.booking_type == BookingType.RENTAL:
                check = await self.check_conflict(car.id, start, end)
                if check.conflict:
                    raise BookingConflict(str(car.id), str(check.booking_id))

            total_amount = calculate_total_amount(
                request.booking_type,
                daily_rate=car.rental_price_daily,
                sale_price=car.sale_price,
                start=start,
                end=end,
            )
            if total_amount <= 0:
                raise ValidationError("Booking total amount must be greater than 0")

            booking = Booking(
                customer_id=request.customer_id,
                car_id=car.id,
                owner_id=request.owner_id,
                booking_type=request.booking_type.value,
                status=BookingStatus.PENDING.value,
                total_amount=total_amount,
                start_date=start,
                end_date=end,
                notes=request.notes,
            )
            await self.bookings.add(booking)
            await audit_service.log_booking_action(
                self.db, "booking_create", booking.id, None, booking.status
            )
            await self.db.commit()
        except AppException:
            await self.db.rollback()
            raise

        logger.info(
            f"Booking created: id={booking.id} car={booking.car_id} type={booking.booking_type} "
            f"total={booking.total_amount}"
        )
        return booking

    async def update_status(self, booking_id: UUID, status: str | BookingStatus) -> Booking:
        """Move a booking to ``status`` if the transition table allows it."""
        target = status.value if isinstance(status, BookingStatus) else status
        # Membership is checked before the row is read
        if target not in {s.value for s in BookingStatus}:
            raise ValidationError(f"Invalid booking status: {target!r}")

        booking = await self.bookings.get(booking_id)
        current = booking.status
        target_status = assert_booking_transition(current, target)

        updated = await self.bookings.update_where_status(
            booking_id, current, {"status": target_status.value}
        )
        if not updated:
            await self.db.rollback()
            raise StaleStateError("Booking", str(booking_id), current, target_status.value)

        await audit_service.log_booking_action(
            self.db, "booking_status_update", booking_id, current, target_status.value
        )
        await self.db.commit()

        logger.info(f"Booking {booking_id} status: {current} -> {target_status.value}")
        return await self.bookings.refresh(booking_id)

    async def delete_booking(self, booking_id: UUID) -> Booking:
        """Delete a pending or cancelled booking and return it."""
        booking = await self.bookings.get(booking_id)
        current = booking.status
        assert_booking_deletable(current)

        deleted = await self.bookings.delete_where_status(
            booking_id, [s.value for s in DELETABLE_STATUSES]
        )
        if not deleted:
            await self.db.rollback()
            raise StaleStateError("Booking", str(booking_id), current, "deleted")

        await audit_service.log_booking_action(
            self.db, "booking_delete", booking_id, current, None
        )
        await self.db.commit()

        logger.info(f"Booking {booking_id} deleted (status was {current})")
        return booking

    # ---- validation ----

    def _validate_request(self, request: BookingCreate) -> tuple[datetime | None, datetime | None]:
        """Check request shape and return the normalized rental window."""
        if request.booking_type == BookingType.PURCHASE:
            # Purchases carry no dates
            return None, None

        if request.start_date is None:
            raise ValidationError("Start date is required for rental bookings")
        if request.end_date is None:
            raise ValidationError("End date is required for rental bookings")

        start = ensure_utc(request.start_date)
        end = ensure_utc(request.end_date)

        if start >= end:
            raise ValidationError("Start date must be before end date")

        if start < utc_now() - START_DATE_GRACE:
            raise ValidationError("Start date cannot be in the past")

        if end - start < MIN_RENTAL_DURATION:
            raise ValidationError("Minimum rental duration is 1 day")

        return start, end
