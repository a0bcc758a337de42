"""Car persistence."""

from uuid import UUID

from sqlalchemy import func, select

from carzone.models.booking import Booking
from carzone.models.car import Car
from carzone.store.base import BaseStore


class CarStore(BaseStore):
    model = Car
    resource_name = "Car"

    async def list_all(self, brand: str | None = None) -> list[Car]:
        stmt = select(Car).order_by(Car.created_at.desc())
        if brand:
            stmt = stmt.where(func.lower(Car.brand) == brand.strip().lower())
        return await self._all(stmt)

    async def count_bookings(self, car_id: UUID, statuses: list[str] | None = None) -> int:
        """Bookings of the car, optionally limited to ``statuses``."""
        stmt = select(func.count()).select_from(Booking).where(Booking.car_id == car_id)
        if statuses is not None:
            stmt = stmt.where(Booking.status.in_(statuses))
        return await self._scalar(stmt)
