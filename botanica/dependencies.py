# botanica/dependencies.py
from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .config import Settings
from .db import get_db
from .models import User
from .repositories import OrderRepository, ProductRepository, PromoCodeRepository, UserRepository
from .services import OrderService, ProductService, PromoCodeService, UserService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def current_user(request: Request) -> User | None:
    return getattr(request.state, "user", None)


def require_user(request: Request) -> User:
    user = current_user(request)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def is_admin(request: Request, user: User | None = Depends(current_user)) -> bool:
    return user is not None and request.app.state.settings.is_admin_email(user.email)


def require_admin(user: User = Depends(require_user), admin: bool = Depends(is_admin)) -> User:
    if not admin:
        raise HTTPException(status_code=403, detail="Access denied")
    return user


# -------------------
# Services (built per request around the request's DB session)
# -------------------
def build_order_service(db: Session, app_state) -> OrderService:
    return OrderService(
        orders=OrderRepository(db),
        users=UserRepository(db),
        promo_codes=PromoCodeService(PromoCodeRepository(db)),
        sheet=app_state.order_sheet,
        notifier=app_state.notifier,
        sync_delay_seconds=app_state.settings.sync_delay_ms / 1000,
    )


def get_order_service(request: Request, db: Session = Depends(get_db)) -> OrderService:
    return build_order_service(db, request.app.state)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(UserRepository(db))


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(ProductRepository(db))


def get_promo_code_service(db: Session = Depends(get_db)) -> PromoCodeService:
    return PromoCodeService(PromoCodeRepository(db))
