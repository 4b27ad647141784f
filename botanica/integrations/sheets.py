# botanica/integrations/sheets.py
from __future__ import annotations

import csv
import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List

from ..models import Order
from ..ordering.cart import format_address, products_cell

log = logging.getLogger(__name__)

SHEET_COLUMNS = [
    "Order ID",
    "Create Date",
    "Client Name",
    "Phone Number",
    "Email",
    "Delivery Address",
    "Products Bought",
    "Sum(Total)",
    "Status",
    "TTN",
    "Comments",
]


def order_to_row(order: Order) -> Dict[str, str]:
    return {
        "Order ID": order.id,
        "Create Date": order.created_at.strftime("%d.%m.%Y %H:%M") if order.created_at else "",
        "Client Name": order.customer_name or "",
        "Phone Number": order.customer_phone or "",
        "Email": order.user_email or "",
        "Delivery Address": format_address(order.delivery_address),
        "Products Bought": products_cell(order.items),
        "Sum(Total)": f"{order.total / 100:.2f}",
        "Status": order.status,
        "TTN": "",
        "Comments": order.notes or "",
    }


class OrderSheet:
    """One-directional mirror of the orders table in a spreadsheet."""

    def add_order(self, order: Order) -> None:
        raise NotImplementedError

    def update_status(self, order_id: str, status: str) -> bool:
        raise NotImplementedError

    def cleanup(self, keep_ids: Iterable[str]) -> int:
        raise NotImplementedError

    def rows(self) -> List[Dict[str, str]]:
        raise NotImplementedError


class CsvOrderSheet(OrderSheet):
    """Order sheet kept as a CSV file, one row per order id."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> List[Dict[str, str]]:
        if not self.path.exists():
            return []
        with self.path.open(newline="", encoding="utf-8") as f:
            return [dict(r) for r in csv.DictReader(f)]

    def _write(self, rows: List[Dict[str, str]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=SHEET_COLUMNS, extrasaction="ignore")
            w.writeheader()
            w.writerows(rows)
        tmp.replace(self.path)

    def rows(self) -> List[Dict[str, str]]:
        with self._lock:
            return self._read()

    def add_order(self, order: Order) -> None:
        row = order_to_row(order)
        with self._lock:
            rows = self._read()
            for i, existing in enumerate(rows):
                if existing.get("Order ID") == order.id:
                    # keep the TTN someone typed into the sheet
                    row["TTN"] = existing.get("TTN", "")
                    rows[i] = row
                    break
            else:
                rows.append(row)
            self._write(rows)
        log.info("order %s written to sheet", order.id)

    def update_status(self, order_id: str, status: str) -> bool:
        with self._lock:
            rows = self._read()
            for r in rows:
                if r.get("Order ID") == order_id:
                    r["Status"] = status
                    self._write(rows)
                    return True
        log.warning("order %s not found in sheet, status %s not written", order_id, status)
        return False

    def cleanup(self, keep_ids: Iterable[str]) -> int:
        keep = set(keep_ids)
        with self._lock:
            rows = self._read()
            kept = [r for r in rows if r.get("Order ID") in keep]
            removed = len(rows) - len(kept)
            if removed:
                self._write(kept)
        if removed:
            log.info("removed %d stale rows from sheet", removed)
        return removed
