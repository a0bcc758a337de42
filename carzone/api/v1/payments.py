"""Payment endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from carzone.api.deps import get_payment_service
from carzone.models.payment import Payment
from carzone.schemas.payment import (
    PaymentCreate,
    PaymentOrderResponse,
    PaymentResponse,
    PaymentStatusUpdate,
    PaymentVerificationRequest,
    RefundRequest,
)
from carzone.services.payment_service import PaymentService

router = APIRouter()

PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]


@router.post("", response_model=PaymentOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(request: PaymentCreate, service: PaymentServiceDep) -> PaymentOrderResponse:
    """Create a payment and, for Razorpay, the checkout order."""
    payment, order = await service.create_payment(
        booking_id=request.booking_id,
        amount=request.amount,
        method=request.method,
        description=request.description,
        notes=request.notes,
    )
    return PaymentOrderResponse(
        payment=PaymentResponse.model_validate(payment),
        order_id=order.id if order else None,
        amount_minor=order.amount if order else None,
        currency=payment.currency,
        key_id=service.gateway.key_id if order and service.gateway else None,
    )


@router.post("/verify", response_model=PaymentResponse)
async def verify_payment(request: PaymentVerificationRequest, service: PaymentServiceDep) -> Payment:
    """Apply the signed confirmation sent back by the gateway checkout."""
    return await service.verify_payment(
        order_id=request.razorpay_order_id,
        gateway_payment_id=request.razorpay_payment_id,
        signature=request.razorpay_signature,
    )


@router.get("", response_model=list[PaymentResponse])
async def list_payments(service: PaymentServiceDep) -> list[Payment]:
    return await service.list_payments()


@router.get("/booking/{booking_id}", response_model=list[PaymentResponse])
async def list_booking_payments(booking_id: UUID, service: PaymentServiceDep) -> list[Payment]:
    return await service.list_by_booking(booking_id)


@router.get("/customer/{customer_id}", response_model=list[PaymentResponse])
async def list_customer_payments(customer_id: UUID, service: PaymentServiceDep) -> list[Payment]:
    return await service.list_by_customer(customer_id)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: UUID, service: PaymentServiceDep) -> Payment:
    return await service.get_payment(payment_id)


@router.patch("/{payment_id}/status", response_model=PaymentResponse)
async def update_payment_status(
    payment_id: UUID,
    request: PaymentStatusUpdate,
    service: PaymentServiceDep,
) -> Payment:
    return await service.update_payment_status(payment_id, request.status)


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    payment_id: UUID,
    request: RefundRequest,
    service: PaymentServiceDep,
) -> Payment:
    """Refund a completed payment. The booking status is not changed."""
    return await service.process_refund(payment_id, request.amount)
