"""Booking-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from carzone.models.enums import BookingStatus, BookingType


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    customer_id: UUID
    car_id: UUID
    owner_id: UUID
    booking_type: BookingType = BookingType.RENTAL
    start_date: datetime | None = None
    end_date: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class BookingStatusUpdate(BaseModel):
    """Schema for moving a booking to a new status."""

    status: BookingStatus


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    customer_id: UUID
    car_id: UUID
    owner_id: UUID
    booking_type: BookingType
    status: BookingStatus
    total_amount: Decimal
    start_date: datetime | None
    end_date: datetime | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class AvailabilityResponse(BaseModel):
    """Schema for a rental window availability check."""

    car_id: UUID
    start_date: datetime
    end_date: datetime
    available: bool
    conflicting_booking_id: UUID | None = None
