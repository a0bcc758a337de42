"""
Unit tests for the payment status transition table.
"""

from __future__ import annotations

import pytest

from carzone.core.exceptions import InvalidTransition, ValidationError
from carzone.domain.payment_state import PAYMENT_TRANSITIONS, assert_payment_transition
from carzone.models.enums import PaymentStatus


@pytest.mark.unit
@pytest.mark.parametrize("target", ["completed", "failed", "cancelled"])
def test_pending_moves_to_any_outcome(target: str) -> None:
    assert assert_payment_transition("pending", target) == PaymentStatus(target)


@pytest.mark.unit
def test_completed_can_only_be_refunded() -> None:
    assert assert_payment_transition("completed", "refunded") == PaymentStatus.REFUNDED
    with pytest.raises(InvalidTransition):
        assert_payment_transition("completed", "failed")


@pytest.mark.unit
@pytest.mark.parametrize("terminal", ["failed", "refunded", "cancelled"])
def test_terminal_states(terminal: str) -> None:
    assert PAYMENT_TRANSITIONS[PaymentStatus(terminal)] == frozenset()
    with pytest.raises(InvalidTransition) as exc_info:
        assert_payment_transition(terminal, "completed")

    assert exc_info.value.detail == f"Invalid payment status transition from {terminal} to completed"


@pytest.mark.unit
def test_pending_cannot_be_refunded() -> None:
    with pytest.raises(InvalidTransition):
        assert_payment_transition("pending", "refunded")


@pytest.mark.unit
def test_unknown_status() -> None:
    with pytest.raises(ValidationError):
        assert_payment_transition("pending", "settled")
