# botanica/repositories.py
from __future__ import annotations

import json
import logging
import random
import time
import uuid
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import Conflict
from .models import (
    DeliveryAddress,
    Order,
    OrderItem,
    Product,
    PromoCode,
    PromoCodeUsage,
    User,
    utcnow,
)

log = logging.getLogger(__name__)

MAX_ORDER_ID_ATTEMPTS = 10


def generate_order_id() -> str:
    """Six digits: last four of the millisecond clock plus two random ones."""
    stamp = str(int(time.time() * 1000))[-4:]
    return stamp + f"{random.randint(0, 99):02d}"


# -------------------
# Users
# -------------------
class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def create(self, user_id: str, email: str) -> User:
        email = email.strip().lower()
        if self.get(user_id):
            raise Conflict("User already exists")
        if self.get_by_email(email):
            raise Conflict("Email already in use")

        u = User(id=user_id, email=email, created_at=utcnow())
        self.db.add(u)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("User already exists") from e
        self.db.refresh(u)
        return u

    def update_profile(self, user_id: str, first_name: str, last_name: str, phone: str) -> Optional[User]:
        u = self.get(user_id)
        if not u:
            return None
        u.first_name = first_name
        u.last_name = last_name
        u.phone = phone
        self.db.add(u)
        self.db.commit()
        self.db.refresh(u)
        return u

    # delivery addresses
    def addresses(self, user_id: str) -> List[DeliveryAddress]:
        return (
            self.db.query(DeliveryAddress)
            .filter(DeliveryAddress.user_id == user_id)
            .order_by(DeliveryAddress.is_default.desc(), DeliveryAddress.created_at)
            .all()
        )

    def get_address(self, address_id: str) -> Optional[DeliveryAddress]:
        return self.db.get(DeliveryAddress, address_id)

    def _clear_default(self, user_id: str, keep_id: str | None = None) -> None:
        q = self.db.query(DeliveryAddress).filter(
            DeliveryAddress.user_id == user_id, DeliveryAddress.is_default.is_(True)
        )
        if keep_id:
            q = q.filter(DeliveryAddress.id != keep_id)
        for a in q.all():
            a.is_default = False

    def create_address(self, user_id: str, fields: Dict[str, Any]) -> DeliveryAddress:
        a = DeliveryAddress(id=str(uuid.uuid4()), user_id=user_id, created_at=utcnow(), updated_at=utcnow())
        for k, v in fields.items():
            setattr(a, k, v)
        if a.is_default:
            self._clear_default(user_id)
        self.db.add(a)
        self.db.commit()
        self.db.refresh(a)
        return a

    def update_address(self, a: DeliveryAddress, fields: Dict[str, Any]) -> DeliveryAddress:
        for k, v in fields.items():
            setattr(a, k, v)
        if a.is_default:
            self._clear_default(a.user_id, keep_id=a.id)
        a.updated_at = utcnow()
        self.db.add(a)
        self.db.commit()
        self.db.refresh(a)
        return a

    def delete_address(self, a: DeliveryAddress) -> None:
        self.db.delete(a)
        self.db.commit()


# -------------------
# Orders
# -------------------
class OrderRepository:
    def __init__(self, db: Session, id_factory: Callable[[], str] = generate_order_id):
        self.db = db
        self.id_factory = id_factory

    def get(self, order_id: str) -> Optional[Order]:
        return self.db.get(Order, order_id)

    def get_by_user(self, user_id: str) -> List[Order]:
        return self.db.query(Order).filter(Order.user_id == user_id).order_by(Order.created_at).all()

    def all(self) -> List[Order]:
        return self.db.query(Order).order_by(Order.created_at).all()

    def ids(self) -> List[str]:
        return [row[0] for row in self.db.query(Order.id).all()]

    def _unique_id(self) -> str:
        for _ in range(MAX_ORDER_ID_ATTEMPTS):
            candidate = self.id_factory()
            if not self.get(candidate):
                return candidate
        log.error("could not generate a unique order id after %d attempts", MAX_ORDER_ID_ATTEMPTS)
        raise Conflict("Failed to generate unique order ID")

    def create(
        self,
        user_id: str,
        items: List[Dict[str, Any]],
        total: int,
        delivery_address: Dict[str, Any] | None = None,
        notes: str | None = None,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        user_email: str | None = None,
        promo_code: str | None = None,
        discount: int = 0,
        order_id: str | None = None,
    ) -> Order:
        now = utcnow()
        order = Order(
            id=order_id or self._unique_id(),
            user_id=user_id,
            total=total,
            status="pending",
            delivery_address_json=json.dumps(delivery_address, ensure_ascii=False) if delivery_address else None,
            notes=notes or None,
            customer_name=customer_name or None,
            customer_phone=customer_phone or None,
            user_email=user_email or None,
            promo_code=promo_code,
            discount=discount,
            created_at=now,
            updated_at=now,
        )
        for it in items:
            order.items.append(OrderItem(**it))

        self.db.add(order)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("Order could not be saved") from e
        self.db.refresh(order)
        return order

    def set_status(self, order: Order, status: str) -> Order:
        order.status = status
        order.updated_at = utcnow()
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def update_fields(
        self,
        order: Order,
        customer_name: str | None = None,
        customer_phone: str | None = None,
        user_email: str | None = None,
    ) -> bool:
        changed = False
        for attr, value in (
            ("customer_name", customer_name),
            ("customer_phone", customer_phone),
            ("user_email", user_email),
        ):
            if value is not None and getattr(order, attr) != value:
                setattr(order, attr, value)
                changed = True
        if changed:
            order.updated_at = utcnow()
            self.db.add(order)
            self.db.commit()
        return changed


# -------------------
# Products
# -------------------
class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def all(self) -> List[Product]:
        return self.db.query(Product).order_by(Product.name).all()

    def get(self, product_id: str) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def by_category(self, category: str) -> List[Product]:
        return self.db.query(Product).filter(Product.category == category).order_by(Product.name).all()

    def search(self, query: str) -> List[Product]:
        like = f"%{query.strip()}%"
        return (
            self.db.query(Product)
            .filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
            .order_by(Product.name)
            .all()
        )

    def low_stock(self, threshold: int) -> List[Product]:
        return self.db.query(Product).filter(Product.stock <= threshold).order_by(Product.stock).all()

    def create(self, fields: Dict[str, Any], product_id: str | None = None) -> Product:
        now = utcnow()
        p = Product(id=product_id or str(uuid.uuid4()), created_at=now, updated_at=now)
        self._apply(p, fields)
        self.db.add(p)
        self.db.commit()
        self.db.refresh(p)
        return p

    def update(self, p: Product, fields: Dict[str, Any]) -> Product:
        self._apply(p, fields)
        p.updated_at = utcnow()
        self.db.add(p)
        self.db.commit()
        self.db.refresh(p)
        return p

    def delete(self, p: Product) -> None:
        self.db.delete(p)
        self.db.commit()

    @staticmethod
    def _apply(p: Product, fields: Dict[str, Any]) -> None:
        for k, v in fields.items():
            if k == "image_urls":
                p.image_urls_json = json.dumps(list(v or []))
            else:
                setattr(p, k, v)


# -------------------
# Promo codes
# -------------------
class PromoCodeRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_code(self, code: str) -> Optional[PromoCode]:
        return self.db.query(PromoCode).filter(PromoCode.code == code.strip().upper()).first()

    def all(self) -> List[PromoCode]:
        return self.db.query(PromoCode).order_by(PromoCode.created_at).all()

    def create(self, fields: Dict[str, Any]) -> PromoCode:
        p = PromoCode(id=str(uuid.uuid4()), created_at=utcnow(), **fields)
        p.code = p.code.strip().upper()
        self.db.add(p)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("Promo code already exists") from e
        self.db.refresh(p)
        return p

    def has_user_used(self, user_id: str, promo_code_id: str) -> bool:
        return (
            self.db.query(PromoCodeUsage)
            .filter(PromoCodeUsage.user_id == user_id, PromoCodeUsage.promo_code_id == promo_code_id)
            .first()
            is not None
        )

    def record_usage(self, promo: PromoCode, user_id: str, order_id: str | None = None) -> None:
        promo.usage_count = (promo.usage_count or 0) + 1
        self.db.add(promo)
        self.db.add(PromoCodeUsage(promo_code_id=promo.id, user_id=user_id, order_id=order_id, used_at=utcnow()))
        self.db.commit()
