from __future__ import annotations

import pytest

from botanica.errors import InvalidTransition, ValidationFailed
from botanica.ordering.status import ORDER_STATUSES, TERMINAL_STATUSES, can_transition, check_transition, normalize_status


@pytest.mark.parametrize("terminal", sorted(TERMINAL_STATUSES))
def test_terminal_statuses_have_no_way_out(terminal):
    for target in ORDER_STATUSES:
        assert not can_transition(terminal, target)
        with pytest.raises(InvalidTransition):
            check_transition(terminal, target)


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "confirmed"),
        ("pending", "cancelled"),
        ("confirmed", "shipped"),
        ("confirmed", "delivered"),
        ("confirmed", "cancelled"),
        ("shipped", "delivered"),
    ],
)
def test_forward_moves_allowed(current, target):
    check_transition(current, target)


@pytest.mark.parametrize("current,target", [("confirmed", "pending"), ("shipped", "confirmed"), ("pending", "delivered")])
def test_backward_or_skipping_moves_rejected(current, target):
    with pytest.raises(InvalidTransition):
        check_transition(current, target)


def test_messages_match_the_cancel_route():
    with pytest.raises(InvalidTransition, match="Cannot cancel delivered order"):
        check_transition("delivered", "cancelled")
    with pytest.raises(InvalidTransition, match="Order is already cancelled"):
        check_transition("cancelled", "cancelled")


def test_normalize_status():
    assert normalize_status(" Confirmed ") == "confirmed"
    with pytest.raises(ValidationFailed):
        normalize_status("lost")
    with pytest.raises(ValidationFailed):
        normalize_status(None)
