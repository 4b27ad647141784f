# botanica/auth.py
from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from fastapi import Response
from sqlalchemy.orm import Session

from .models import User, UserSession, utcnow

log = logging.getLogger(__name__)

SESSION_DAYS = 30
SESSION_RENEW_DAYS = 15


def generate_session_token() -> str:
    return base64.urlsafe_b64encode(secrets.token_bytes(18)).rstrip(b"=").decode()


def session_id_for(token: str) -> str:
    # only the hash of the cookie value is ever stored
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(
    db: Session,
    token: str,
    user_id: str,
    now: Optional[datetime] = None,
    days: int = SESSION_DAYS,
) -> UserSession:
    now = now or utcnow()
    session = UserSession(id=session_id_for(token), user_id=user_id, expires_at=now + timedelta(days=days))
    db.add(session)
    db.commit()
    log.info("session created for user %s", user_id)
    return session


def validate_session_token(
    db: Session,
    token: str,
    now: Optional[datetime] = None,
    days: int = SESSION_DAYS,
    renew_days: int = SESSION_RENEW_DAYS,
) -> Tuple[Optional[UserSession], Optional[User]]:
    """Resolve a cookie token to (session, user).

    Unknown or expired tokens give (None, None); expired rows are deleted on
    the way. A session inside its renewal window gets a fresh full lifetime.
    """
    now = now or utcnow()
    row = (
        db.query(UserSession, User)
        .join(User, UserSession.user_id == User.id)
        .filter(UserSession.id == session_id_for(token))
        .first()
    )
    if not row:
        log.debug("no session for presented token")
        return None, None

    session, user = row
    if now >= session.expires_at:
        log.info("session for user %s expired, deleting", user.id)
        db.delete(session)
        db.commit()
        return None, None

    if now >= session.expires_at - timedelta(days=renew_days):
        session.expires_at = now + timedelta(days=days)
        db.add(session)
        db.commit()
        log.debug("session for user %s renewed until %s", user.id, session.expires_at)

    return session, user


def invalidate_session(db: Session, session_id: str) -> None:
    db.query(UserSession).filter(UserSession.id == session_id).delete()
    db.commit()


def invalidate_user_sessions(db: Session, user_id: str) -> int:
    n = db.query(UserSession).filter(UserSession.user_id == user_id).delete()
    db.commit()
    return n


def delete_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    now = now or utcnow()
    n = db.query(UserSession).filter(UserSession.expires_at <= now).delete()
    db.commit()
    return n


# -------------------
# Cookie helpers
# -------------------
def set_session_cookie(
    response: Response,
    token: str,
    expires_at: datetime,
    cookie_name: str = "auth-session",
    secure: bool = False,
) -> None:
    max_age = max(0, int((expires_at - utcnow()).total_seconds()))
    response.set_cookie(
        key=cookie_name,
        value=token,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=secure,
    )


def delete_session_cookie(response: Response, cookie_name: str = "auth-session") -> None:
    response.delete_cookie(key=cookie_name, path="/", httponly=True, samesite="lax")
