# botanica/services/promo_codes.py
from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import ValidationFailed
from ..models import PromoCode, utcnow
from ..repositories import PromoCodeRepository

log = logging.getLogger(__name__)

DISCOUNT_TYPES = ("percentage", "fixed", "free_shipping")
CODE_PREFIX = "BAL"
_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass
class PromoValidation:
    valid: bool
    message: str
    error: Optional[str] = None
    discount: int = 0
    promo: Optional[PromoCode] = None

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"valid": self.valid, "message": self.message}
        if self.error:
            out["error"] = self.error
        if self.valid and self.promo is not None:
            out["discount"] = self.discount
            out["promoCode"] = {
                "code": self.promo.code,
                "discountType": self.promo.discount_type,
                "discountValue": self.promo.discount_value,
            }
        return out


def calculate_discount(promo: PromoCode, cart_total: int) -> int:
    if promo.discount_type == "percentage":
        discount = cart_total * promo.discount_value // 100
    elif promo.discount_type == "fixed":
        discount = promo.discount_value
    else:
        # free shipping is applied at checkout, not to the cart
        discount = 0

    if promo.maximum_discount and discount > promo.maximum_discount:
        discount = promo.maximum_discount
    return max(0, min(discount, cart_total))


class PromoCodeService:
    def __init__(self, repo: PromoCodeRepository):
        self.repo = repo

    def validate(self, code: str, user_id: str, cart_total: int, now: Optional[datetime] = None) -> PromoValidation:
        now = now or utcnow()
        promo = self.repo.find_by_code(code or "")
        if not promo:
            return PromoValidation(False, "Promo code not found.", "code_not_found")
        if not promo.is_active:
            return PromoValidation(False, "This promo code is no longer active.", "code_inactive")
        if promo.expires_at and promo.expires_at < now:
            return PromoValidation(False, "This promo code has expired.", "code_expired")
        if promo.usage_limit and promo.usage_count >= promo.usage_limit:
            return PromoValidation(False, "This promo code has reached its usage limit.", "usage_limit_exceeded")
        if promo.minimum_amount and cart_total < promo.minimum_amount:
            return PromoValidation(
                False,
                f"Minimum order amount of ₴{promo.minimum_amount / 100:.2f} required.",
                "minimum_amount_not_met",
            )
        if self.repo.has_user_used(user_id, promo.id):
            return PromoValidation(False, "You have already used this promo code.", "already_used")

        return PromoValidation(
            True,
            "Promo code applied successfully!",
            discount=calculate_discount(promo, cart_total),
            promo=promo,
        )

    def record_usage(self, promo: PromoCode, user_id: str, order_id: str | None = None) -> None:
        self.repo.record_usage(promo, user_id, order_id)
        log.info("promo code %s used by %s on order %s", promo.code, user_id, order_id)

    def create(
        self,
        discount_type: str,
        discount_value: int,
        code: str | None = None,
        description: str = "",
        minimum_amount: int | None = None,
        maximum_discount: int | None = None,
        expires_at: datetime | None = None,
        usage_limit: int | None = None,
        is_active: bool = True,
    ) -> PromoCode:
        if discount_type not in DISCOUNT_TYPES:
            raise ValidationFailed("Invalid discount type")
        if discount_value < 0:
            raise ValidationFailed("Discount cannot be negative")
        if discount_type == "percentage" and discount_value > 100:
            raise ValidationFailed("Percentage discount cannot exceed 100")

        return self.repo.create(
            {
                "code": code or generate_code(),
                "description": description,
                "discount_type": discount_type,
                "discount_value": discount_value,
                "minimum_amount": minimum_amount,
                "maximum_discount": maximum_discount,
                "expires_at": expires_at,
                "usage_limit": usage_limit,
                "is_active": is_active,
            }
        )

    def list_all(self) -> List[PromoCode]:
        return self.repo.all()


def generate_code() -> str:
    return CODE_PREFIX + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(8))
