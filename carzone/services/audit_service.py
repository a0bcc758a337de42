"""Audit trail for car changes and booking and payment state changes."""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from carzone.models.audit import AuditLog


class AuditService:
    """Service for append-only audit logging."""

    async def log_action(
        self,
        db: AsyncSession,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Record an action in the caller's transaction.

        Args:
            db: Database session
            action: Action name (e.g., "booking_status_update")
            resource_type: Resource type ("car", "booking" or "payment")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state

        Returns:
            Created audit log entry
        """
        audit = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
        )
        db.add(audit)
        return audit

    async def log_booking_action(
        self,
        db: AsyncSession,
        action: str,
        booking_id: UUID,
        old_status: str | None,
        new_status: str | None,
    ) -> AuditLog:
        """Log booking creation, status change or deletion."""
        return await self.log_action(
            db=db,
            action=action,
            resource_type="booking",
            resource_id=booking_id,
            old_values={"status": old_status} if old_status else None,
            new_values={"status": new_status} if new_status else None,
        )

    async def log_payment_action(
        self,
        db: AsyncSession,
        action: str,
        payment_id: UUID,
        old_status: str | None,
        new_status: str,
        amount: str | None = None,
        gateway_payment_id: str | None = None,
    ) -> AuditLog:
        """Log payment status change."""
        new_values: dict[str, Any] = {"status": new_status}
        if amount is not None:
            new_values["amount"] = amount
        if gateway_payment_id:
            new_values["gateway_payment_id"] = gateway_payment_id

        return await self.log_action(
            db=db,
            action=action,
            resource_type="payment",
            resource_id=payment_id,
            old_values={"status": old_status} if old_status else None,
            new_values=new_values,
        )


audit_service = AuditService()
