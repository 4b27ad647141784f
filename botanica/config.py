# botanica/config.py
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env locally (safe in prod too)
load_dotenv()


def _env(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _env_flag(name: str, default: str = "0") -> bool:
    return _env(name, default).lower() not in {"0", "false", "no", ""}


def _env_list(name: str) -> List[str]:
    return [x.strip().lower() for x in os.getenv(name, "").split(",") if x.strip()]


class Settings(BaseModel):
    database_url: str = Field(default_factory=lambda: _env("DATABASE_URL", "sqlite:///balance_botanica.db"))

    session_cookie_name: str = Field(default_factory=lambda: _env("SESSION_COOKIE_NAME", "auth-session"))
    session_days: int = Field(default_factory=lambda: _env_int("SESSION_DAYS", 30))
    session_renew_days: int = Field(default_factory=lambda: _env_int("SESSION_RENEW_DAYS", 15))
    cookie_secure: bool = Field(default_factory=lambda: _env_flag("COOKIE_SECURE"))

    admin_emails: List[str] = Field(default_factory=lambda: _env_list("ADMIN_EMAILS"))

    order_sheet_path: str = Field(default_factory=lambda: _env("ORDER_SHEET_PATH", "orders_sheet.csv"))
    upload_dir: str = Field(default_factory=lambda: _env("UPLOAD_DIR", "uploads"))
    upload_base_url: str = Field(default_factory=lambda: _env("UPLOAD_BASE_URL", "/uploads"))
    sync_delay_ms: int = Field(default_factory=lambda: _env_int("SYNC_DELAY_MS", 100))

    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO").upper())

    def is_admin_email(self, email: str | None) -> bool:
        return bool(email) and email.strip().lower() in self.admin_emails
