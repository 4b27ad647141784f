# botanica/api/promo_codes.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends

from ..dependencies import get_promo_code_service, require_admin, require_user
from ..errors import ValidationFailed
from ..models import User
from ..schemas import CamelModel, PromoIn, promo_to_dict
from ..services import PromoCodeService

router = APIRouter(prefix="/api/promo-codes", tags=["promo-codes"])


class PromoCreateIn(CamelModel):
    code: Optional[str] = None
    description: str = ""
    discount_type: str
    discount_value: int
    minimum_amount: Optional[int] = None
    maximum_discount: Optional[int] = None
    expires_at: Optional[datetime] = None
    usage_limit: Optional[int] = None
    is_active: bool = True


@router.post("")
def promo_action(
    payload: PromoIn,
    user: User = Depends(require_user),
    promos: PromoCodeService = Depends(get_promo_code_service),
):
    if not payload.action:
        raise ValidationFailed("Action is required")

    if payload.action == "validate":
        if not payload.code or not payload.cart_total:
            raise ValidationFailed("Code and cart total are required for validation")
        result = promos.validate(payload.code.upper(), user.id, payload.cart_total)
        return {"success": result.valid, **result.as_dict()}

    if payload.action == "remove":
        return {"success": True, "message": "Promo code removed successfully"}

    raise ValidationFailed("Invalid action")


@router.get("")
def list_promo_codes(
    _admin: User = Depends(require_admin),
    promos: PromoCodeService = Depends(get_promo_code_service),
):
    return {"success": True, "data": [promo_to_dict(p) for p in promos.list_all()]}


@router.post("/create", status_code=201)
def create_promo_code(
    payload: PromoCreateIn,
    _admin: User = Depends(require_admin),
    promos: PromoCodeService = Depends(get_promo_code_service),
):
    promo = promos.create(**payload.model_dump())
    return {"success": True, "data": promo_to_dict(promo)}
