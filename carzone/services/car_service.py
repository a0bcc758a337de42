"""Car catalogue management."""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from carzone.core.exceptions import AuthorizationMismatch, ConflictError, ValidationError
from carzone.models.car import Car
from carzone.models.enums import ACTIVE_BOOKING_STATUSES
from carzone.schemas.car import CarCreate, CarUpdate
from carzone.services.audit_service import audit_service
from carzone.store.cars import CarStore

logger = logging.getLogger(__name__)

# Fields an update may clear with an explicit null
NULLABLE_FIELDS = frozenset({"description", "sale_price"})


class CarService:
    """Service for registering, updating and removing cars."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.cars = CarStore(db)

    async def get_car(self, car_id: UUID) -> Car:
        return await self.cars.get(car_id)

    async def list_cars(self, brand: str | None = None) -> list[Car]:
        return await self.cars.list_all(brand=brand)

    async def list_by_brand(self, brand: str) -> list[Car]:
        if not brand or not brand.strip():
            raise ValidationError("Brand cannot be empty")
        return await self.cars.list_all(brand=brand)

    async def create_car(self, data: CarCreate) -> Car:
        car = await self.cars.add(Car(**data.model_dump()))
        await self.db.commit()

        logger.info(f"Car created: id={car.id} owner={car.owner_id} brand={car.brand}")
        return car

    async def update_car(self, car_id: UUID, data: CarUpdate) -> Car:
        """Apply the fields set in ``data``. The owner cannot be changed."""
        car = await self.cars.get(car_id, for_update=True)
        if car.owner_id is None or car.owner_id != data.owner_id:
            await self.db.rollback()
            raise AuthorizationMismatch(
                f"Owner ID '{data.owner_id}' does not match owner of car '{car_id}'"
            )

        update_data = {
            field: value
            for field, value in data.model_dump(exclude_unset=True, exclude={"owner_id"}).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        old_values = {field: _jsonable(getattr(car, field)) for field in update_data}

        for field, value in update_data.items():
            setattr(car, field, value)

        await self.cars.save(car)
        await audit_service.log_action(
            self.db,
            action="car_update",
            resource_type="car",
            resource_id=car_id,
            old_values=old_values,
            new_values={field: _jsonable(value) for field, value in update_data.items()},
        )
        await self.db.commit()

        logger.info(f"Car {car_id} updated: fields={sorted(update_data)}")
        return await self.cars.refresh(car_id)

    async def delete_car(self, car_id: UUID) -> Car:
        """Delete a car that has no bookings.

        The car row is locked first, so no booking can be admitted for it
        while the check runs.
        """
        car = await self.cars.get(car_id, for_update=True)

        active = await self.cars.count_bookings(
            car_id, [status.value for status in ACTIVE_BOOKING_STATUSES]
        )
        if active:
            await self.db.rollback()
            raise ConflictError(f"Car '{car_id}' has {active} active booking(s) and cannot be deleted")

        if await self.cars.count_bookings(car_id):
            await self.db.rollback()
            raise ConflictError(
                f"Car '{car_id}' has booking history; mark it unavailable instead of deleting it"
            )

        await self.cars.delete(car)
        await audit_service.log_action(
            self.db, action="car_delete", resource_type="car", resource_id=car_id
        )
        await self.db.commit()

        logger.info(f"Car {car_id} deleted")
        return car


def _jsonable(value):
    if value is None or isinstance(value, (bool, int, str)):
        return value
    return str(value)
