# botanica/middleware.py
from __future__ import annotations

import logging
from typing import Optional, Tuple

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from .auth import delete_session_cookie, set_session_cookie, validate_session_token
from .models import User, UserSession

log = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """Attach request.state.user / request.state.session from the session cookie.

    A valid cookie is re-set with the current expiry, an invalid one is
    cleared. Routes that manage the cookie themselves set
    request.state.session_cookie_handled.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = request.app.state.settings
        request.state.user = None
        request.state.session = None
        request.state.session_cookie_handled = False

        token = request.cookies.get(settings.session_cookie_name)
        if not token:
            return await call_next(request)

        session, user = await run_in_threadpool(self._validate, request, token)
        request.state.session = session
        request.state.user = user

        response = await call_next(request)
        if request.state.session_cookie_handled:
            return response

        if session is not None:
            set_session_cookie(
                response,
                token,
                session.expires_at,
                cookie_name=settings.session_cookie_name,
                secure=settings.cookie_secure,
            )
        else:
            delete_session_cookie(response, cookie_name=settings.session_cookie_name)
        return response

    @staticmethod
    def _validate(request: Request, token: str) -> Tuple[Optional[UserSession], Optional[User]]:
        settings = request.app.state.settings
        db = request.app.state.session_factory()
        try:
            return validate_session_token(
                db, token, days=settings.session_days, renew_days=settings.session_renew_days
            )
        except Exception:
            # treat as anonymous
            log.exception("session validation failed")
            return None, None
        finally:
            db.close()


CONTENT_SECURITY_POLICY = "; ".join(
    [
        "default-src 'self'",
        "script-src 'self' 'unsafe-inline' https://*.supabase.co",
        "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com",
        "img-src 'self' data: https: blob:",
        "connect-src 'self' https://*.supabase.co wss://*.supabase.co",
        "font-src 'self' https://fonts.gstatic.com",
        "object-src 'none'",
        "base-uri 'self'",
        "form-action 'self'",
        "frame-ancestors 'none'",
    ]
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
        response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
        return response
