"""Payment-related Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from carzone.models.enums import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    """Schema for initiating a payment."""

    booking_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: PaymentMethod = PaymentMethod.RAZORPAY
    description: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=2000)


class PaymentVerificationRequest(BaseModel):
    """Signed confirmation returned by the gateway checkout."""

    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class PaymentStatusUpdate(BaseModel):
    """Schema for moving a payment to a new status."""

    status: PaymentStatus


class RefundRequest(BaseModel):
    """Schema for refunding a completed payment."""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    gateway_order_id: str | None
    gateway_payment_id: str | None
    amount: Decimal
    currency: str
    refunded_amount: Decimal | None
    status: PaymentStatus
    method: PaymentMethod
    transaction_id: str | None
    description: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


class PaymentOrderResponse(BaseModel):
    """Payment plus what a checkout client needs to open the gateway."""

    payment: PaymentResponse
    order_id: str | None = None
    amount_minor: int | None = None
    currency: str
    key_id: str | None = None
