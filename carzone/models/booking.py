"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from carzone.database import Base
from carzone.models.enums import BookingStatus
from carzone.utils.datetime import utc_now

if TYPE_CHECKING:
    from carzone.models.car import Car
    from carzone.models.payment import Payment


class Booking(Base):
    """Rental or purchase booking against a car."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("total_amount > 0", name="ck_bookings_total_amount_positive"),
        CheckConstraint(
            "booking_type <> 'rental' OR (start_date IS NOT NULL AND end_date IS NOT NULL AND start_date < end_date)",
            name="ck_bookings_rental_window",
        ),
        Index("ix_bookings_car_window", "car_id", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    car_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("cars.id"), nullable=False, index=True
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    booking_type: Mapped[str] = mapped_column(String(20), nullable=False)  # rental, purchase
    status: Mapped[str] = mapped_column(
        String(20), default=BookingStatus.PENDING.value, nullable=False, index=True
    )  # pending, confirmed, completed, cancelled

    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Rental window, half-open [start_date, end_date)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, server_default=func.now()
    )

    # Relationships
    car: Mapped["Car"] = relationship("Car", back_populates="bookings")
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="booking", passive_deletes=True
    )
