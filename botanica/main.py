# botanica/main.py
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import models  # noqa: F401  (registers tables on Base)
from .api import auth as auth_routes
from .api import images as image_routes
from .api import orders as order_routes
from .api import products as product_routes
from .api import promo_codes as promo_routes
from .api import users as user_routes
from .config import Settings
from .db import Base, build_engine, build_session_factory
from .dependencies import build_order_service
from .errors import BotanicaError
from .integrations.images import ImageHost, LocalImageHost
from .integrations.notifier import LogNotifier, OrderNotifier
from .integrations.sheets import CsvOrderSheet, OrderSheet
from .middleware import SecurityHeadersMiddleware, SessionMiddleware
from .services import FullSyncRunner

log = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BotanicaError)
    async def _botanica_error(request: Request, exc: BotanicaError):
        log.warning("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(HTTPException)
    async def _http_error(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        log.info("%s %s -> invalid body: %s", request.method, request.url.path, exc.errors())
        return _error(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception):
        log.exception("%s %s failed", request.method, request.url.path)
        return _error(500, "Internal server error")


def create_app(
    settings: Settings | None = None,
    order_sheet: OrderSheet | None = None,
    notifier: OrderNotifier | None = None,
    image_host: ImageHost | None = None,
) -> FastAPI:
    """Build the API. Run with `uvicorn --factory botanica.main:create_app`."""
    settings = settings or Settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    engine = build_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="Balance Botanica API", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.order_sheet = order_sheet if order_sheet is not None else CsvOrderSheet(settings.order_sheet_path)
    app.state.notifier = notifier if notifier is not None else LogNotifier()
    app.state.image_host = image_host if image_host is not None else LocalImageHost(
        settings.upload_dir, settings.upload_base_url
    )
    app.state.sync_runner = FullSyncRunner(
        app.state.session_factory,
        lambda db: build_order_service(db, app.state),
    )

    # last added runs first: security headers wrap the session layer
    app.add_middleware(SessionMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    _install_error_handlers(app)

    @app.get("/")
    def root():
        return {"ok": True, "service": "balance-botanica-api"}

    app.include_router(auth_routes.router)
    app.include_router(user_routes.router)
    app.include_router(order_routes.router)
    app.include_router(product_routes.router)
    app.include_router(promo_routes.router)
    app.include_router(image_routes.router)

    if isinstance(app.state.image_host, LocalImageHost) and settings.upload_base_url.startswith("/"):
        upload_dir = Path(settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)
        app.mount(settings.upload_base_url, StaticFiles(directory=str(upload_dir)), name="uploads")

    return app
