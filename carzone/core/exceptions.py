"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(AppException):
    """Interval overlap, illegal state transition or lost update."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        current: str | None = None,
        target: str | None = None,
    ) -> None:
        self.current = current
        self.target = target
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class BookingConflict(ConflictError):
    """Requested rental window overlaps an active booking."""

    def __init__(self, car_id: str, conflicting_booking_id: str | None = None) -> None:
        self.conflicting_booking_id = conflicting_booking_id
        detail = f"Booking conflicts with existing rental for car '{car_id}' in the same period"
        if conflicting_booking_id:
            detail = f"{detail} (booking '{conflicting_booking_id}')"
        super().__init__(detail=detail)


class InvalidTransition(ConflictError):
    """Status change not present in the transition table."""

    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            detail=f"Invalid {entity} status transition from {current} to {target}",
            current=current,
            target=target,
        )


class StaleStateError(ConflictError):
    """Row changed between read and conditional write."""

    def __init__(self, entity: str, identifier: str, expected: str, target: str) -> None:
        super().__init__(
            detail=(
                f"{entity} '{identifier}' is no longer {expected}; "
                f"cannot move it to {target}"
            ),
            current=expected,
            target=target,
        )


class PaymentAlreadyCompleted(ConflictError):
    """Payment was already completed with a different gateway payment."""

    def __init__(self, payment_id: str, existing_gateway_payment_id: str | None, gateway_payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(
            detail=(
                f"Payment '{payment_id}' is already completed with gateway payment "
                f"'{existing_gateway_payment_id}', refusing '{gateway_payment_id}'"
            ),
            current="completed",
            target="completed",
        )


class AuthorizationMismatch(AppException):
    """Owner reference does not match the car's recorded owner."""

    def __init__(self, detail: str = "Owner ID does not match car owner") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class SignatureVerificationFailed(AppException):
    """Gateway confirmation signature did not match."""

    def __init__(self, payment_id: str | None = None, order_id: str | None = None) -> None:
        self.payment_id = payment_id
        self.order_id = order_id
        detail = "Payment signature verification failed"
        if order_id:
            detail = f"{detail} for order '{order_id}'"
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class PersistenceError(AppException):
    """Storage layer failure."""

    def __init__(self, detail: str = "Database operation failed") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


class ExternalServiceError(AppException):
    """External service error."""

    def __init__(self, service: str, detail: str | None = None) -> None:
        self.service = service
        message = f"External service '{service}' is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)
