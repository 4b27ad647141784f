# botanica/api/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from ..auth import (
    create_session,
    delete_session_cookie,
    generate_session_token,
    invalidate_session,
    invalidate_user_sessions,
    set_session_cookie,
)
from ..config import Settings
from ..db import get_db
from ..dependencies import get_settings, get_user_service
from ..errors import ValidationFailed
from ..schemas import LoginIn
from ..services import UserService

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(
    payload: LoginIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    users: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    """Start a session for a user the auth provider has already verified."""
    if not payload.user_id.strip():
        raise ValidationFailed("User ID is required")
    if not payload.email:
        raise ValidationFailed("Email is required")

    user = users.get_or_create(payload.user_id, str(payload.email))

    # drop any session the browser still carries
    old = getattr(request.state, "session", None)
    if old is not None:
        invalidate_session(db, old.id)

    token = generate_session_token()
    session = create_session(db, token, user.id, days=settings.session_days)
    set_session_cookie(
        response,
        token,
        session.expires_at,
        cookie_name=settings.session_cookie_name,
        secure=settings.cookie_secure,
    )
    request.state.session_cookie_handled = True

    log.info("login for user %s", user.id)
    return {"success": True, "userId": user.id}


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    session = getattr(request.state, "session", None)
    if session is not None:
        invalidate_session(db, session.id)
        log.info("logout for user %s", session.user_id)

    delete_session_cookie(response, cookie_name=settings.session_cookie_name)
    request.state.session_cookie_handled = True
    return {"success": True}


@router.post("/logout-all")
def logout_everywhere(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """End every session of the current user, on all devices."""
    session = getattr(request.state, "session", None)
    if session is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    removed = invalidate_user_sessions(db, session.user_id)
    log.info("logout everywhere for user %s, %d sessions", session.user_id, removed)

    delete_session_cookie(response, cookie_name=settings.session_cookie_name)
    request.state.session_cookie_handled = True
    return {"success": True, "sessions": removed}
