"""Car endpoints."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from carzone.api.deps import get_booking_service, get_car_service
from carzone.core.exceptions import ValidationError
from carzone.models.car import Car
from carzone.schemas.booking import AvailabilityResponse
from carzone.schemas.car import CarCreate, CarResponse, CarUpdate
from carzone.services.booking_service import BookingService
from carzone.services.car_service import CarService

router = APIRouter()

CarServiceDep = Annotated[CarService, Depends(get_car_service)]


@router.post("", response_model=CarResponse, status_code=status.HTTP_201_CREATED)
async def create_car(data: CarCreate, service: CarServiceDep) -> Car:
    """Register a car for rental or sale."""
    return await service.create_car(data)


@router.get("", response_model=list[CarResponse])
async def list_cars(
    service: CarServiceDep,
    brand: str | None = Query(None, description="Filter by brand (case-insensitive)"),
) -> list[Car]:
    return await service.list_cars(brand=brand)


@router.get("/brand/{brand}", response_model=list[CarResponse])
async def list_cars_by_brand(brand: str, service: CarServiceDep) -> list[Car]:
    return await service.list_by_brand(brand)


@router.get("/{car_id}", response_model=CarResponse)
async def get_car(car_id: UUID, service: CarServiceDep) -> Car:
    return await service.get_car(car_id)


@router.put("/{car_id}", response_model=CarResponse)
async def update_car(car_id: UUID, data: CarUpdate, service: CarServiceDep) -> Car:
    """Update a car. Only its recorded owner may do so."""
    return await service.update_car(car_id, data)


@router.delete("/{car_id}", response_model=CarResponse)
async def delete_car(car_id: UUID, service: CarServiceDep) -> Car:
    """Delete a car that has never been booked."""
    return await service.delete_car(car_id)


@router.get("/{car_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    car_id: UUID,
    service: Annotated[BookingService, Depends(get_booking_service)],
    start: Annotated[datetime, Query()],
    end: Annotated[datetime, Query()],
) -> AvailabilityResponse:
    """Check whether ``[start, end)`` is free for a rental."""
    if start >= end:
        raise ValidationError("Start date must be before end date")

    # 404 for unknown cars
    await service.cars.get(car_id)
    check = await service.check_conflict(car_id, start, end)
    return AvailabilityResponse(
        car_id=car_id,
        start_date=start,
        end_date=end,
        available=not check.conflict,
        conflicting_booking_id=check.booking_id,
    )
