"""Payment creation and gateway reconciliation.

A payment is stored ``pending`` before the gateway order is requested, so a
gateway failure always leaves a ``failed`` record behind instead of nothing.
Signed confirmations are applied at most once: every status change is a
conditional update on the status the service read.
"""

import logging
import time
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from carzone.core.exceptions import (
    ConflictError,
    ExternalServiceError,
    PaymentAlreadyCompleted,
    SignatureVerificationFailed,
    StaleStateError,
    ValidationError,
)
from carzone.core.security import is_test_signature, verify_payment_signature
from carzone.domain.payment_state import assert_payment_transition
from carzone.gateways.base import MAX_RECEIPT_LENGTH, GatewayOrder, PaymentGateway
from carzone.models.enums import BookingStatus, PaymentMethod, PaymentStatus
from carzone.models.payment import Payment
from carzone.services.audit_service import audit_service
from carzone.store.bookings import BookingStore
from carzone.store.payments import PaymentStore

logger = logging.getLogger(__name__)


def build_receipt(booking_id: UUID) -> str:
    """Merchant receipt for a booking, e.g. ``bk_1a2b3c4d_4821``."""
    receipt = f"bk_{str(booking_id)[-8:]}_{int(time.time()) % 10000}"
    return receipt[:MAX_RECEIPT_LENGTH]


def to_minor_units(amount: Decimal) -> int:
    """Currency units to the gateway's smallest unit (rupees to paise)."""
    return int((Decimal(amount) * 100).quantize(Decimal("1")))


class PaymentService:
    """Service for payment lifecycle and signature reconciliation."""

    def __init__(
        self,
        db: AsyncSession,
        gateway: PaymentGateway | None,
        signing_secret: str,
        allow_test_signatures: bool = False,
        currency: str = "INR",
    ):
        self.db = db
        self.gateway = gateway
        self._signing_secret = signing_secret
        self.allow_test_signatures = allow_test_signatures
        self.currency = currency
        self.payments = PaymentStore(db)
        self.bookings = BookingStore(db)

    # ---- reads ----

    async def get_payment(self, payment_id: UUID) -> Payment:
        return await self.payments.get(payment_id)

    async def list_payments(self) -> list[Payment]:
        return await self.payments.list_all()

    async def list_by_booking(self, booking_id: UUID) -> list[Payment]:
        return await self.payments.list_by_booking(booking_id)

    async def list_by_customer(self, customer_id: UUID) -> list[Payment]:
        return await self.payments.list_by_customer(customer_id)

    async def get_latest_for_booking(self, booking_id: UUID) -> Payment | None:
        payments = await self.payments.list_by_booking(booking_id)
        return payments[0] if payments else None

    # ---- creation ----

    async def create_payment(
        self,
        booking_id: UUID,
        amount: Decimal,
        method: str | PaymentMethod = PaymentMethod.RAZORPAY,
        description: str | None = None,
        notes: str | None = None,
    ) -> tuple[Payment, GatewayOrder | None]:
        """Create a pending payment and, for Razorpay, its gateway order.

        Returns:
            The payment and the gateway order (None for offline methods)

        Raises:
            ValidationError: Bad amount or method, or the booking is cancelled
            NotFoundError: Booking does not exist
            ExternalServiceError: Gateway failed; the payment is left ``failed``
        """
        if amount is None or Decimal(amount) <= 0:
            raise ValidationError("Payment amount must be greater than 0")

        try:
            payment_method = PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Invalid payment method: {method!r}") from None

        booking = await self.bookings.get(booking_id)
        if booking.status == BookingStatus.CANCELLED.value:
            raise ValidationError(f"Cannot create payment for cancelled booking '{booking_id}'")

        payment = Payment(
            booking_id=booking.id,
            amount=Decimal(amount),
            currency=self.currency,
            status=PaymentStatus.PENDING.value,
            method=payment_method.value,
            description=description,
            notes=notes,
        )
        await self.payments.add(payment)
        await audit_service.log_payment_action(
            self.db, "payment_create", payment.id, None, payment.status, amount=str(payment.amount)
        )
        await self.db.commit()

        if payment_method != PaymentMethod.RAZORPAY:
            logger.info(f"Payment created: id={payment.id} method={payment.method} (no gateway order)")
            return payment, None

        try:
            if self.gateway is None:
                raise ExternalServiceError("razorpay", "gateway not configured")
            order = await self.gateway.create_order(
                amount=to_minor_units(payment.amount),
                currency=self.currency,
                receipt=build_receipt(booking.id),
            )
        except ExternalServiceError:
            logger.error(f"Gateway order failed for payment {payment.id}; marking failed")
            await self._mark_failed(payment)
            raise

        payment = await self.payments.set_order_id(payment.id, order.id)
        await self.db.commit()

        logger.info(f"Payment created: id={payment.id} order={order.id} amount={payment.amount}")
        return payment, order

    async def _mark_failed(self, payment: Payment) -> None:
        updated = await self.payments.update_where_status(
            payment.id, PaymentStatus.PENDING.value, {"status": PaymentStatus.FAILED.value}
        )
        if updated:
            await audit_service.log_payment_action(
                self.db,
                "payment_gateway_failed",
                payment.id,
                PaymentStatus.PENDING.value,
                PaymentStatus.FAILED.value,
            )
        await self.db.commit()
        await self.payments.refresh(payment.id)

    # ---- reconciliation ----

    async def verify_payment(
        self,
        order_id: str,
        gateway_payment_id: str,
        signature: str,
    ) -> Payment:
        """Apply a signed gateway confirmation to the payment for ``order_id``.

        Replaying the confirmation that completed a payment returns it
        unchanged.

        Raises:
            ValidationError: A field is empty
            NotFoundError: No payment for the order
            SignatureVerificationFailed: Signature mismatch (a pending payment is
                marked failed first)
            PaymentAlreadyCompleted: Completed with a different gateway payment
            ConflictError: Payment is in another terminal state, or the booking
                already has a completed payment
        """
        if not order_id or not gateway_payment_id or not signature:
            raise ValidationError("Order ID, payment ID and signature are required")

        payment = await self.payments.get_by_order_id(order_id, for_update=True)

        signature_valid = verify_payment_signature(
            self._signing_secret,
            order_id,
            gateway_payment_id,
            signature,
            allow_test_signatures=self.allow_test_signatures,
        )
        if signature_valid and self.allow_test_signatures and is_test_signature(signature):
            logger.warning(f"Test signature accepted for order {order_id}")

        if payment.status == PaymentStatus.COMPLETED.value:
            if not signature_valid:
                logger.warning(f"Invalid signature replayed for completed payment {payment.id}")
                raise SignatureVerificationFailed(str(payment.id), order_id)
            if payment.gateway_payment_id == gateway_payment_id:
                logger.info(f"Payment {payment.id} already verified; returning stored record")
                return payment
            raise PaymentAlreadyCompleted(
                str(payment.id), payment.gateway_payment_id, gateway_payment_id
            )

        if payment.status != PaymentStatus.PENDING.value:
            # Raises InvalidTransition for every remaining terminal state
            assert_payment_transition(payment.status, PaymentStatus.COMPLETED.value)

        if not signature_valid:
            await self._fail_verification(payment, gateway_payment_id)
            raise SignatureVerificationFailed(str(payment.id), order_id)

        await self._assert_no_other_completed(payment)

        payment_id = payment.id
        updated = await self.payments.update_where_status(
            payment_id,
            PaymentStatus.PENDING.value,
            {
                "status": PaymentStatus.COMPLETED.value,
                "gateway_payment_id": gateway_payment_id,
                "transaction_id": gateway_payment_id,
            },
        )
        if not updated:
            await self.db.rollback()
            return await self._resolve_lost_race(payment_id, gateway_payment_id)

        await audit_service.log_payment_action(
            self.db,
            "payment_verified",
            payment.id,
            PaymentStatus.PENDING.value,
            PaymentStatus.COMPLETED.value,
            amount=str(payment.amount),
            gateway_payment_id=gateway_payment_id,
        )
        await self.db.commit()

        logger.info(f"Payment verified: id={payment.id} order={order_id} gateway_payment={gateway_payment_id}")
        return await self.payments.refresh(payment.id)

    async def _assert_no_other_completed(self, payment: Payment) -> None:
        """Refuse to complete a second payment for the same booking."""
        completed = await self.payments.find_completed_for_booking(payment.booking_id)
        if completed is not None and completed.id != payment.id:
            raise ConflictError(
                f"Booking '{payment.booking_id}' already has completed payment '{completed.id}'",
                current=PaymentStatus.COMPLETED.value,
                target=PaymentStatus.COMPLETED.value,
            )

    async def _fail_verification(self, payment: Payment, gateway_payment_id: str) -> None:
        """Record a signature mismatch on a pending payment."""
        updated = await self.payments.update_where_status(
            payment.id,
            PaymentStatus.PENDING.value,
            {"status": PaymentStatus.FAILED.value, "gateway_payment_id": gateway_payment_id},
        )
        if updated:
            await audit_service.log_payment_action(
                self.db,
                "payment_signature_failed",
                payment.id,
                PaymentStatus.PENDING.value,
                PaymentStatus.FAILED.value,
                gateway_payment_id=gateway_payment_id,
            )
        await self.db.commit()
        logger.warning(f"Payment signature verification failed: id={payment.id}")

    async def _resolve_lost_race(self, payment_id: UUID, gateway_payment_id: str) -> Payment:
        """Another verification changed the payment between read and write."""
        current = await self.payments.refresh(payment_id)
        if (
            current.status == PaymentStatus.COMPLETED.value
            and current.gateway_payment_id == gateway_payment_id
        ):
            logger.info(f"Concurrent verification already completed payment {payment_id}")
            return current
        raise StaleStateError(
            "Payment", str(payment_id), PaymentStatus.PENDING.value, PaymentStatus.COMPLETED.value
        )

    # ---- status changes ----

    async def update_payment_status(self, payment_id: UUID, status: str | PaymentStatus) -> Payment:
        """Move a payment to ``status`` if the transition table allows it.

        Completing a payment is refused with ``ConflictError`` while another
        payment of the same booking is completed.
        """
        target = status.value if isinstance(status, PaymentStatus) else status
        if target not in {s.value for s in PaymentStatus}:
            raise ValidationError(f"Invalid payment status: {target!r}")

        payment = await self.payments.get(payment_id)
        current = payment.status
        target_status = assert_payment_transition(current, target)
        if target_status == PaymentStatus.COMPLETED:
            await self._assert_no_other_completed(payment)

        updated = await self.payments.update_where_status(
            payment_id, current, {"status": target_status.value}
        )
        if not updated:
            await self.db.rollback()
            raise StaleStateError("Payment", str(payment_id), current, target_status.value)

        await audit_service.log_payment_action(
            self.db, "payment_status_update", payment_id, current, target_status.value
        )
        await self.db.commit()

        logger.info(f"Payment {payment_id} status: {current} -> {target_status.value}")
        return await self.payments.refresh(payment_id)

    async def process_refund(self, payment_id: UUID, amount: Decimal) -> Payment:
        """Refund a completed payment, fully or partially.

        The booking is left as it is.
        """
        if amount is None or Decimal(amount) <= 0:
            raise ValidationError("Refund amount must be greater than 0")

        payment = await self.payments.get(payment_id)
        assert_payment_transition(payment.status, PaymentStatus.REFUNDED.value)

        refund_amount = Decimal(amount)
        if refund_amount > payment.amount:
            raise ValidationError(
                f"Refund amount {refund_amount} exceeds payment amount {payment.amount}"
            )

        updated = await self.payments.update_where_status(
            payment_id,
            PaymentStatus.COMPLETED.value,
            {"status": PaymentStatus.REFUNDED.value, "refunded_amount": refund_amount},
        )
        if not updated:
            await self.db.rollback()
            raise StaleStateError(
                "Payment", str(payment_id), PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value
            )

        await audit_service.log_payment_action(
            self.db,
            "payment_refund",
            payment_id,
            PaymentStatus.COMPLETED.value,
            PaymentStatus.REFUNDED.value,
            amount=str(refund_amount),
        )
        await self.db.commit()

        logger.info(f"Payment {payment_id} refunded: amount={refund_amount}")
        return await self.payments.refresh(payment_id)
