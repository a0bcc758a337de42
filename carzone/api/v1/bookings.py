"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from carzone.api.deps import get_booking_service
from carzone.models.booking import Booking
from carzone.schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from carzone.services.booking_service import BookingService

router = APIRouter()

BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(request: BookingCreate, service: BookingServiceDep) -> Booking:
    """Create a pending rental or purchase booking."""
    return await service.create_booking(request)


@router.get("", response_model=list[BookingResponse])
async def list_bookings(service: BookingServiceDep) -> list[Booking]:
    return await service.list_bookings()


@router.get("/car/{car_id}", response_model=list[BookingResponse])
async def list_car_bookings(car_id: UUID, service: BookingServiceDep) -> list[Booking]:
    return await service.list_by_car(car_id)


@router.get("/customer/{customer_id}", response_model=list[BookingResponse])
async def list_customer_bookings(customer_id: UUID, service: BookingServiceDep) -> list[Booking]:
    return await service.list_by_customer(customer_id)


@router.get("/owner/{owner_id}", response_model=list[BookingResponse])
async def list_owner_bookings(owner_id: UUID, service: BookingServiceDep) -> list[Booking]:
    return await service.list_by_owner(owner_id)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: UUID, service: BookingServiceDep) -> Booking:
    return await service.get_booking(booking_id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    request: BookingStatusUpdate,
    service: BookingServiceDep,
) -> Booking:
    """Move a booking along its lifecycle."""
    return await service.update_status(booking_id, request.status)


@router.delete("/{booking_id}", response_model=BookingResponse)
async def delete_booking(booking_id: UUID, service: BookingServiceDep) -> Booking:
    """Delete a pending or cancelled booking and return it."""
    return await service.delete_booking(booking_id)
