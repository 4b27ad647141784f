# botanica/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from .models import DeliveryAddress, Order, OrderItem, Product, PromoCode, User


class CamelModel(BaseModel):
    # wire format is camelCase, python side is snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -------------------
# Requests
# -------------------
class LoginIn(CamelModel):
    user_id: str = ""
    email: Optional[EmailStr] = None


class ProfileIn(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None


class AddressIn(CamelModel):
    name: Optional[str] = None
    is_default: bool = False
    street: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    np_city_name: Optional[str] = None
    np_city_full_name: Optional[str] = None
    np_warehouse: Optional[str] = None
    use_nova_post: bool = True


class OrderItemIn(CamelModel):
    product_id: str = ""
    product_name: str = ""
    quantity: int = 0
    price: int = 0  # unit price, kopiyky
    size: str = ""
    flavor: str = ""


class OrderCreateIn(CamelModel):
    items: List[OrderItemIn] = []
    total: Optional[int] = None  # kopiyky
    delivery_address: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    promo_code: Optional[str] = None


class StatusIn(CamelModel):
    status: Optional[str] = None


class ProductIn(CamelModel):
    name: str
    description: str = ""
    category: str
    price: int
    stock: int = 0
    image_urls: List[str] = []
    size: Optional[str] = None
    flavor: Optional[str] = None


class ProductUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[int] = None
    stock: Optional[int] = None
    image_urls: Optional[List[str]] = None
    size: Optional[str] = None
    flavor: Optional[str] = None


class PromoIn(CamelModel):
    action: Optional[str] = None
    code: Optional[str] = None
    cart_total: Optional[int] = None


# -------------------
# Responses (plain dicts, camelCase keys)
# -------------------
def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def user_to_dict(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "email": u.email,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "phoneNumber": u.phone,
        "createdAt": _iso(u.created_at),
    }


def order_item_to_dict(item: OrderItem) -> Dict[str, Any]:
    return {
        "productId": item.product_id,
        "productName": item.product_name,
        "quantity": item.quantity,
        "price": item.price,
        "total": item.total,
        "size": item.size or "",
        "flavor": item.flavor or "",
    }


def order_to_dict(o: Order) -> Dict[str, Any]:
    return {
        "id": o.id,
        "userId": o.user_id,
        "items": [order_item_to_dict(i) for i in o.items],
        "total": o.total,
        "discount": o.discount,
        "promoCode": o.promo_code,
        "status": o.status,
        "deliveryAddress": o.delivery_address,
        "notes": o.notes,
        "customerName": o.customer_name,
        "customerPhone": o.customer_phone,
        "userEmail": o.user_email,
        "createdAt": _iso(o.created_at),
        "updatedAt": _iso(o.updated_at),
    }


def product_to_dict(p: Product) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description or "",
        "category": p.category,
        "price": p.price,
        "stock": p.stock,
        "imageUrls": p.image_urls,
        "size": p.size,
        "flavor": p.flavor,
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }


def address_to_dict(a: DeliveryAddress) -> Dict[str, Any]:
    return {
        "id": a.id,
        "name": a.name,
        "isDefault": a.is_default,
        "street": a.street,
        "city": a.city,
        "postalCode": a.postal_code,
        "country": a.country,
        "npCityName": a.np_city_name,
        "npCityFullName": a.np_city_full_name,
        "npWarehouse": a.np_warehouse,
        "useNovaPost": a.use_nova_post,
    }


def promo_to_dict(p: PromoCode) -> Dict[str, Any]:
    return {
        "id": p.id,
        "code": p.code,
        "description": p.description or "",
        "discountType": p.discount_type,
        "discountValue": p.discount_value,
        "minimumAmount": p.minimum_amount,
        "maximumDiscount": p.maximum_discount,
        "expiresAt": _iso(p.expires_at),
        "usageLimit": p.usage_limit,
        "usageCount": p.usage_count,
        "isActive": p.is_active,
    }
