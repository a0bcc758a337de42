"""Payment persistence."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from carzone.core.exceptions import ConflictError, NotFoundError
from carzone.models.booking import Booking
from carzone.models.enums import PaymentStatus
from carzone.models.payment import Payment
from carzone.store.base import BaseStore

logger = logging.getLogger(__name__)

# Partial unique index: at most one completed payment per booking
COMPLETED_PAYMENT_INDEX = "uq_payments_booking_completed"
# SQLite reports the indexed column instead of the index name
COMPLETED_PAYMENT_SQLITE_MARKER = "payments.booking_id"


class PaymentStore(BaseStore):
    model = Payment
    resource_name = "Payment"

    def _translate_write_error(self, error: SQLAlchemyError, entity: Payment | None = None) -> Exception:
        if isinstance(error, IntegrityError) and _is_completed_payment_violation(error):
            logger.warning(f"Completed-payment index rejected write: {error.orig}")
            return ConflictError(
                "Booking already has a completed payment",
                current=PaymentStatus.COMPLETED.value,
                target=PaymentStatus.COMPLETED.value,
            )
        return super()._translate_write_error(error, entity)

    async def get_by_order_id(self, order_id: str, for_update: bool = False) -> Payment:
        stmt = select(Payment).where(Payment.gateway_order_id == order_id)
        if for_update:
            stmt = stmt.with_for_update()
        payment = await self._one_or_none(stmt)
        if payment is None:
            raise NotFoundError("Payment for order", order_id)
        return payment

    async def list_all(self) -> list[Payment]:
        return await self._all(select(Payment).order_by(Payment.created_at.desc()))

    async def list_by_booking(self, booking_id: UUID) -> list[Payment]:
        return await self._all(
            select(Payment)
            .where(Payment.booking_id == booking_id)
            .order_by(Payment.created_at.desc())
        )

    async def list_by_customer(self, customer_id: UUID) -> list[Payment]:
        return await self._all(
            select(Payment)
            .join(Booking, Booking.id == Payment.booking_id)
            .where(Booking.customer_id == customer_id)
            .order_by(Payment.created_at.desc())
        )

    async def find_completed_for_booking(self, booking_id: UUID) -> Payment | None:
        return await self._one_or_none(
            select(Payment).where(
                Payment.booking_id == booking_id,
                Payment.status == PaymentStatus.COMPLETED.value,
            )
        )

    async def set_order_id(self, payment_id: UUID, order_id: str) -> Payment:
        """Attach the gateway order id to a still-pending payment."""
        await self.update_where_status(
            payment_id, PaymentStatus.PENDING.value, {"gateway_order_id": order_id}
        )
        return await self.refresh(payment_id)


def _is_completed_payment_violation(error: IntegrityError) -> bool:
    message = str(error.orig)
    return COMPLETED_PAYMENT_INDEX in message or COMPLETED_PAYMENT_SQLITE_MARKER in message
