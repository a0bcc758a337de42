"""Core utilities and security modules."""

from carzone.core.exceptions import (
    AppException,
    AuthorizationMismatch,
    BookingConflict,
    ConflictError,
    ExternalServiceError,
    InvalidTransition,
    NotFoundError,
    PaymentAlreadyCompleted,
    PersistenceError,
    SignatureVerificationFailed,
    StaleStateError,
    ValidationError,
)
from carzone.core.security import sign_payment, verify_payment_signature

__all__ = [
    "AppException",
    "AuthorizationMismatch",
    "BookingConflict",
    "ConflictError",
    "ExternalServiceError",
    "InvalidTransition",
    "NotFoundError",
    "PaymentAlreadyCompleted",
    "PersistenceError",
    "SignatureVerificationFailed",
    "StaleStateError",
    "ValidationError",
    "sign_payment",
    "verify_payment_signature",
]
