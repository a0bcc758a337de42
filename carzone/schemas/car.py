"""Car-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CarCreate(BaseModel):
    """Schema for registering a car."""

    owner_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    brand: str = Field(..., min_length=1, max_length=255)
    model: str = Field(..., min_length=1, max_length=255)
    year: int = Field(..., ge=1886, le=2100)
    description: str | None = None
    rental_price_daily: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    sale_price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    is_available: bool = True


class CarUpdate(BaseModel):
    """Schema for updating a car. ``owner_id`` must match the recorded owner."""

    owner_id: UUID
    name: str | None = Field(None, min_length=1, max_length=255)
    brand: str | None = Field(None, min_length=1, max_length=255)
    model: str | None = Field(None, min_length=1, max_length=255)
    year: int | None = Field(None, ge=1886, le=2100)
    description: str | None = None
    rental_price_daily: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    sale_price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    is_available: bool | None = None


class CarResponse(BaseModel):
    """Schema for car response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID | None
    name: str
    brand: str
    model: str
    year: int
    description: str | None
    rental_price_daily: Decimal
    sale_price: Decimal | None
    is_available: bool
    created_at: datetime
    updated_at: datetime
