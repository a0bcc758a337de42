"""Payment database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from carzone.database import Base
from carzone.models.enums import PaymentStatus
from carzone.utils.datetime import utc_now

if TYPE_CHECKING:
    from carzone.models.booking import Booking


class Payment(Base):
    """Payment attempt for a booking."""

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint(
            "refunded_amount IS NULL OR refunded_amount <= amount",
            name="ck_payments_refund_within_amount",
        ),
        # At most one completed payment per booking
        Index(
            "uq_payments_booking_completed",
            "booking_id",
            unique=True,
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Gateway
    gateway_order_id: Mapped[str | None] = mapped_column(String(255), unique=True, index=True)
    gateway_payment_id: Mapped[str | None] = mapped_column(String(255))

    # Amount (currency units)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR", nullable=False)
    refunded_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.PENDING.value, nullable=False, index=True
    )  # pending, completed, failed, refunded, cancelled
    method: Mapped[str] = mapped_column(
        String(20), nullable=False
    )  # razorpay, cash, card, upi, netbanking

    transaction_id: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, server_default=func.now()
    )

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="payments")
