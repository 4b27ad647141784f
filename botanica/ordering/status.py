# botanica/ordering/status.py
from __future__ import annotations

from typing import Dict, FrozenSet

from ..errors import InvalidTransition, ValidationFailed

ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled")
TERMINAL_STATUSES = frozenset({"delivered", "cancelled"})

# forward-only; delivered and cancelled have no way out
_NEXT: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"confirmed", "cancelled"}),
    "confirmed": frozenset({"shipped", "delivered", "cancelled"}),
    "shipped": frozenset({"delivered", "cancelled"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}

STATUS_TEXT_UK = {
    "pending": "Очікує підтвердження",
    "confirmed": "Підтверджено",
    "shipped": "Відправлено",
    "delivered": "Доставлено",
    "cancelled": "Скасовано",
}


def normalize_status(raw: str | None) -> str:
    status = (raw or "").strip().lower()
    if status not in ORDER_STATUSES:
        raise ValidationFailed("Invalid order status")
    return status


def can_transition(current: str, target: str) -> bool:
    return target in _NEXT.get(current, frozenset())


def check_transition(current: str, target: str) -> None:
    if can_transition(current, target):
        return

    if current == "delivered" and target == "cancelled":
        raise InvalidTransition("Cannot cancel delivered order")
    if current == target:
        raise InvalidTransition(f"Order is already {current}")
    if current in TERMINAL_STATUSES:
        raise InvalidTransition(f"Order is {current} and can no longer change")
    raise InvalidTransition(f"Cannot move order from {current} to {target}")


def status_text(status: str) -> str:
    return STATUS_TEXT_UK.get(status, status)
