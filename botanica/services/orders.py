# botanica/services/orders.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..errors import AccessDenied, NotFound, ValidationFailed
from ..integrations.notifier import OrderNotifier
from ..integrations.sheets import OrderSheet
from ..models import Order
from ..ordering.cart import cart_total, line_total
from ..ordering.status import check_transition, normalize_status
from ..repositories import OrderRepository, UserRepository
from ..schemas import OrderCreateIn
from .promo_codes import PromoCodeService

log = logging.getLogger(__name__)


@dataclass
class SyncReport:
    total: int = 0
    synced: int = 0
    failed: int = 0
    removed: int = 0
    failed_ids: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "synced": self.synced,
            "failed": self.failed,
            "removed": self.removed,
            "failedIds": list(self.failed_ids),
        }


class OrderService:
    def __init__(
        self,
        orders: OrderRepository,
        users: UserRepository,
        promo_codes: PromoCodeService,
        sheet: Optional[OrderSheet] = None,
        notifier: Optional[OrderNotifier] = None,
        sync_delay_seconds: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.orders = orders
        self.users = users
        self.promo_codes = promo_codes
        self.sheet = sheet
        self.notifier = notifier
        self.sync_delay_seconds = sync_delay_seconds
        self.sleep = sleep

    # -------------------
    # Reads
    # -------------------
    def list_for_user(self, user_id: str) -> List[Order]:
        return self.orders.get_by_user(user_id)

    def list_all(self) -> List[Order]:
        return self.orders.all()

    def get_for_user(self, order_id: str, user_id: str, is_admin: bool = False) -> Order:
        order = self.orders.get(order_id)
        if not order:
            raise NotFound("Order not found")
        if order.user_id != user_id and not is_admin:
            raise AccessDenied("Access denied")
        return order

    # -------------------
    # Create
    # -------------------
    def create_order(self, user_id: str, data: OrderCreateIn) -> Order:
        if not user_id:
            raise ValidationFailed("User is required")
        if not data.items:
            raise ValidationFailed("Order must contain at least one item")

        lines = []
        for item in data.items:
            if not item.product_id.strip() or not item.product_name.strip() or item.quantity <= 0 or item.price <= 0:
                raise ValidationFailed("Invalid order item")
            lines.append(
                {
                    "product_id": item.product_id.strip(),
                    "product_name": item.product_name.strip(),
                    "quantity": item.quantity,
                    "price": item.price,
                    "total": line_total(item.quantity, item.price),
                    "size": item.size or "",
                    "flavor": item.flavor or "",
                }
            )

        subtotal = cart_total(lines)
        if data.total is not None and data.total <= 0:
            raise ValidationFailed("Invalid order total")

        promo = None
        discount = 0
        if data.promo_code and data.promo_code.strip():
            check = self.promo_codes.validate(data.promo_code, user_id, subtotal)
            if not check.valid:
                raise ValidationFailed(check.message)
            promo = check.promo
            discount = check.discount

        total = subtotal - discount
        if data.total is not None and data.total != total:
            raise ValidationFailed("Order total does not match items")
        if total <= 0:
            raise ValidationFailed("Invalid order total")

        user = self.users.get(user_id)
        if not user:
            raise NotFound("User not found")

        order = self.orders.create(
            user_id=user_id,
            items=lines,
            total=total,
            delivery_address=data.delivery_address,
            notes=(data.notes or "").strip() or None,
            customer_name=(data.customer_name or "").strip() or user.full_name or None,
            customer_phone=(data.customer_phone or "").strip() or user.phone,
            user_email=user.email,
            promo_code=promo.code if promo else None,
            discount=discount,
        )
        log.info("order %s created for user %s, total %d", order.id, user_id, order.total)

        if promo:
            self.promo_codes.record_usage(promo, user_id, order.id)

        self._push_new_order(order)
        return order

    # -------------------
    # Status
    # -------------------
    def change_status(self, order_id: str, target: str | None, user_id: str, is_admin: bool = False) -> Order:
        status = normalize_status(target)
        order = self.orders.get(order_id)
        if not order:
            raise NotFound("Order not found")
        if order.user_id != user_id and not is_admin:
            raise AccessDenied("Access denied")

        check_transition(order.status, status)
        previous = order.status
        order = self.orders.set_status(order, status)
        log.info("order %s: %s -> %s", order.id, previous, status)

        self._push_status(order.id, status)
        return order

    def cancel(self, order_id: str, user_id: str) -> Order:
        return self.change_status(order_id, "cancelled", user_id)

    # -------------------
    # Sheet sync
    # -------------------
    def sync_user_orders(self, user_id: str) -> List[Order]:
        """Push the user's orders to the sheet.

        Customer fields left blank in the database are filled from the
        sheet row first; the database stays the source of truth otherwise.
        """
        orders = self.orders.get_by_user(user_id)
        if self.sheet is None:
            return orders

        try:
            sheet_rows = {r.get("Order ID"): r for r in self.sheet.rows()}
        except Exception:
            log.exception("failed to read order sheet")
            sheet_rows = {}

        for order in orders:
            row = sheet_rows.get(order.id)
            if row:
                self._backfill_from_sheet(order, row)
            try:
                self.sheet.add_order(order)
            except Exception:
                log.exception("failed to sync order %s to sheet", order.id)
        return orders

    def _backfill_from_sheet(self, order: Order, row: dict) -> None:
        changed = self.orders.update_fields(
            order,
            customer_name=None if order.customer_name else (row.get("Client Name") or None),
            customer_phone=None if order.customer_phone else (row.get("Phone Number") or None),
            user_email=None if order.user_email else (row.get("Email") or None),
        )
        if changed:
            log.info("order %s: customer fields filled from sheet", order.id)

    def sync_all_orders(self) -> SyncReport:
        report = SyncReport()
        if self.sheet is None:
            log.warning("no order sheet configured, nothing to sync")
            return report

        orders = self.orders.all()
        report.total = len(orders)
        log.info("full sync: %d orders", report.total)

        for i, order in enumerate(orders):
            if i and self.sync_delay_seconds:
                self.sleep(self.sync_delay_seconds)
            try:
                self.sheet.add_order(order)
                report.synced += 1
            except Exception:
                log.exception("full sync: order %s failed", order.id)
                report.failed += 1
                report.failed_ids.append(order.id)

        try:
            report.removed = self.sheet.cleanup(self.orders.ids())
        except Exception:
            log.exception("full sync: sheet cleanup failed")
        log.info(
            "full sync done: synced=%d failed=%d removed=%d", report.synced, report.failed, report.removed
        )
        return report

    def _push_new_order(self, order: Order) -> None:
        if self.sheet is not None:
            try:
                self.sheet.add_order(order)
            except Exception:
                log.exception("failed to sync order %s to sheet", order.id)
        if self.notifier is not None:
            try:
                self.notifier.notify_new_order(order)
            except Exception:
                log.exception("failed to notify about order %s", order.id)

    def _push_status(self, order_id: str, status: str) -> None:
        if self.sheet is None:
            return
        try:
            self.sheet.update_status(order_id, status)
        except Exception:
            log.exception("failed to sync status of order %s to sheet", order_id)
