"""Payment state machine."""

from carzone.core.exceptions import InvalidTransition, ValidationError
from carzone.models.enums import PaymentStatus

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.CANCELLED}
    ),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
    PaymentStatus.CANCELLED: frozenset(),
}


def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid payment status: {value!r}") from None


def assert_payment_transition(current: str, target: str) -> PaymentStatus:
    current_status = parse_payment_status(current)
    target_status = parse_payment_status(target)
    if target_status not in PAYMENT_TRANSITIONS[current_status]:
        raise InvalidTransition("payment", current_status.value, target_status.value)
    return target_status
