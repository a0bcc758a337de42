"""Booking persistence."""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from carzone.core.exceptions import BookingConflict, PersistenceError
from carzone.models.booking import Booking
from carzone.models.enums import ACTIVE_BOOKING_STATUSES, BookingType
from carzone.store.base import BaseStore

logger = logging.getLogger(__name__)

# Name of the PostgreSQL exclusion constraint on active rental windows
WINDOW_EXCLUSION_CONSTRAINT = "ex_bookings_active_window"
EXCLUSION_VIOLATION_SQLSTATE = "23P01"


class BookingStore(BaseStore):
    model = Booking
    resource_name = "Booking"

    async def list_all(self) -> list[Booking]:
        return await self._all(select(Booking).order_by(Booking.created_at.desc()))

    async def list_by_car(self, car_id: UUID) -> list[Booking]:
        return await self._all(
            select(Booking).where(Booking.car_id == car_id).order_by(Booking.created_at.desc())
        )

    async def list_by_customer(self, customer_id: UUID) -> list[Booking]:
        return await self._all(
            select(Booking)
            .where(Booking.customer_id == customer_id)
            .order_by(Booking.created_at.desc())
        )

    async def list_by_owner(self, owner_id: UUID) -> list[Booking]:
        return await self._all(
            select(Booking).where(Booking.owner_id == owner_id).order_by(Booking.created_at.desc())
        )

    async def list_active_rentals(self, car_id: UUID) -> list[Booking]:
        """Rentals of the car that still hold their window."""
        return await self._all(
            select(Booking).where(
                Booking.car_id == car_id,
                Booking.booking_type == BookingType.RENTAL.value,
                Booking.status.in_([status.value for status in ACTIVE_BOOKING_STATUSES]),
            )
        )

    def _translate_write_error(self, error: SQLAlchemyError, entity: Booking | None = None) -> Exception:
        if isinstance(error, IntegrityError) and _is_window_violation(error):
            logger.warning(f"Rental window exclusion constraint rejected insert: {error.orig}")
            return BookingConflict(car_id=str(entity.car_id) if entity else "unknown")
        return super()._translate_write_error(error, entity)

    async def delete_where_status(self, booking_id: UUID, allowed_statuses: list[str]) -> bool:
        """Delete the booking only while its status is one of ``allowed_statuses``."""
        stmt = (
            delete(Booking)
            .where(Booking.id == booking_id, Booking.status.in_(allowed_statuses))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Booking delete failed: {e}")
            raise PersistenceError("Failed to delete booking") from e
        return result.rowcount == 1


def _is_window_violation(error: IntegrityError) -> bool:
    sqlstate = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    return sqlstate == EXCLUSION_VIOLATION_SQLSTATE or WINDOW_EXCLUSION_CONSTRAINT in str(error.orig)
