# botanica/integrations/notifier.py
from __future__ import annotations

import logging

from ..models import Order
from ..ordering.cart import build_summary, format_address
from ..ordering.status import status_text

log = logging.getLogger(__name__)


def format_order_message(order: Order) -> str:
    summary, _total = build_summary(order.items, order.total)
    lines = [
        f"New order {order.id}",
        f"Status: {status_text(order.status)}",
    ]
    if order.customer_name:
        lines.append(f"Customer: {order.customer_name}")
    if order.customer_phone:
        lines.append(f"Phone: {order.customer_phone}")
    if order.user_email:
        lines.append(f"Email: {order.user_email}")
    address = format_address(order.delivery_address)
    if address:
        lines.append(f"Delivery: {address}")
    if order.promo_code:
        lines.append(f"Promo code: {order.promo_code} (-{order.discount / 100:.2f} ₴)")
    lines.append("")
    lines.append(summary)
    if order.notes:
        lines.append("")
        lines.append(f"Notes: {order.notes}")
    return "\n".join(lines)


class OrderNotifier:
    def notify_new_order(self, order: Order) -> None:
        raise NotImplementedError


class LogNotifier(OrderNotifier):
    """Writes new-order messages to the log instead of a chat bot."""

    def __init__(self, logger: logging.Logger | None = None):
        self.log = logger or log

    def notify_new_order(self, order: Order) -> None:
        self.log.info("%s", format_order_message(order))
