# botanica/ordering/cart.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

CURRENCY_SYMBOL = "₴"


def format_money(kopiyky: int, currency_symbol: str = CURRENCY_SYMBOL) -> str:
    return f"{kopiyky / 100:.2f} {currency_symbol}"


def line_total(quantity: int, unit_price: int) -> int:
    return int(quantity) * int(unit_price)


def cart_total(lines: Iterable[Dict[str, Any]]) -> int:
    total = 0
    for x in lines:
        total += line_total(x.get("quantity", 0) or 0, x.get("price", 0) or 0)
    return total


def build_summary(items: List[Any], total: int, currency_symbol: str = CURRENCY_SYMBOL) -> Tuple[str, int]:
    """Plain-text order summary. Items are OrderItem rows or anything with the same attributes."""
    if not items:
        return ("Order is empty.", 0)

    lines: List[str] = []
    for i, item in enumerate(items, start=1):
        name = item.product_name
        extras = ", ".join(x for x in (item.size, item.flavor) if x)
        if extras:
            name = f"{name} ({extras})"
        lines.append(
            f"{i}. {name}\n"
            f"   {item.quantity} шт. × {format_money(item.price, currency_symbol)}"
            f" = {format_money(item.total, currency_symbol)}"
        )

    return ("\n".join(lines) + f"\n\nTotal: {format_money(total, currency_symbol)}", total)


def products_cell(items: List[Any]) -> str:
    """Sheet cell text, e.g. "CBD Oil 10% (2 шт.); Treats (1 шт.)"."""
    return "; ".join(f"{item.product_name} ({item.quantity} шт.)" for item in items)


def format_address(address: Dict[str, Any] | None) -> str:
    if not address:
        return ""
    if address.get("useNovaPost") or address.get("npWarehouse"):
        city = address.get("npCityFullName") or address.get("npCityName") or ""
        parts = [p for p in (city, address.get("npWarehouse")) if p]
        return "Нова Пошта: " + ", ".join(parts) if parts else ""
    parts = [address.get(k) for k in ("street", "city", "postalCode", "country")]
    return ", ".join(str(p) for p in parts if p)
