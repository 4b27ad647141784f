# botanica/models.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .db import Base


def utcnow() -> datetime:
    # naive UTC; SQLite drops tzinfo on the way back anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


def load_json_dict(raw: str | None) -> Dict[str, Any] | None:
    if not raw:
        return None
    try:
        v = json.loads(raw)
        return v if isinstance(v, dict) else None
    except ValueError:
        return None


def load_json_list(raw: str | None) -> List[Any]:
    if not raw:
        return []
    try:
        v = json.loads(raw)
        return v if isinstance(v, list) else []
    except ValueError:
        return []


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True)  # auth provider id or uuid4
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="user")
    addresses = relationship("DeliveryAddress", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


class UserSession(Base):
    __tablename__ = "sessions"
    id = Column(String, primary_key=True)  # sha256 hex of the cookie token
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")


class Product(Base):
    __tablename__ = "products"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, default="")
    category = Column(String, nullable=False, index=True)
    price = Column(Integer, nullable=False)  # kopiyky
    stock = Column(Integer, nullable=False, default=0)
    image_urls_json = Column(Text, default="[]")
    size = Column(String, nullable=True)
    flavor = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def image_urls(self) -> List[str]:
        return [str(u) for u in load_json_list(self.image_urls_json)]


class Order(Base):
    __tablename__ = "orders"
    id = Column(String, primary_key=True)  # 6-digit order code
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    total = Column(Integer, nullable=False)  # kopiyky, after discount
    status = Column(String, nullable=False, default="pending")
    delivery_address_json = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    customer_name = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)
    user_email = Column(String, nullable=True)

    promo_code = Column(String, nullable=True)
    discount = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )

    @property
    def delivery_address(self) -> Dict[str, Any] | None:
        return load_json_dict(self.delivery_address_json)


class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True)
    order_id = Column(String, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)  # unit price, kopiyky
    total = Column(Integer, nullable=False)
    size = Column(String, default="")
    flavor = Column(String, default="")

    order = relationship("Order", back_populates="items")


class DeliveryAddress(Base):
    __tablename__ = "delivery_addresses"
    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False, default="")
    is_default = Column(Boolean, nullable=False, default=False)
    street = Column(String, default="")
    city = Column(String, default="")
    postal_code = Column(String, default="")
    country = Column(String, default="Ukraine")

    # Nova Poshta branch delivery
    np_city_name = Column(String, nullable=True)
    np_city_full_name = Column(String, nullable=True)
    np_warehouse = Column(String, nullable=True)
    use_nova_post = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="addresses")


class PromoCode(Base):
    __tablename__ = "promo_codes"
    id = Column(String, primary_key=True)
    code = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, default="")
    discount_type = Column(String, nullable=False)  # percentage | fixed | free_shipping
    discount_value = Column(Integer, nullable=False, default=0)
    minimum_amount = Column(Integer, nullable=True)
    maximum_discount = Column(Integer, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class PromoCodeUsage(Base):
    __tablename__ = "promo_code_usages"
    id = Column(Integer, primary_key=True)
    promo_code_id = Column(String, ForeignKey("promo_codes.id"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    order_id = Column(String, nullable=True)
    used_at = Column(DateTime, default=utcnow, nullable=False)
