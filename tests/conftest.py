from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from botanica.config import Settings
from botanica.main import create_app
from botanica.repositories import OrderRepository, UserRepository

ADMIN_EMAIL = "admin@botanica.shop"


def email_for(user_id: str) -> str:
    return f"{user_id}@botanica.shop"


class RecordingSheet:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.added = []
        self.statuses = []
        self.kept = None

    def add_order(self, order):
        if self.fail:
            raise RuntimeError("sheet unavailable")
        self.added.append(order.id)

    def update_status(self, order_id, status):
        if self.fail:
            raise RuntimeError("sheet unavailable")
        self.statuses.append((order_id, status))
        return True

    def cleanup(self, keep_ids):
        self.kept = sorted(keep_ids)
        return 0

    def rows(self):
        return []


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def notify_new_order(self, order):
        if self.fail:
            raise RuntimeError("bot unavailable")
        self.sent.append(order.id)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        order_sheet_path=str(tmp_path / "orders_sheet.csv"),
        upload_dir=str(tmp_path / "uploads"),
        upload_base_url="/uploads",
        admin_emails=[ADMIN_EMAIL],
        sync_delay_ms=0,
        log_level="WARNING",
    )


@pytest.fixture
def sheet():
    return RecordingSheet()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(settings, sheet, notifier):
    return create_app(settings, order_sheet=sheet, notifier=notifier)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(user_id: str, email: str | None = None):
        return UserRepository(db).create(user_id, email or email_for(user_id))

    return _make


@pytest.fixture
def make_order(db):
    def _make(user_id: str, order_id: str | None = None, status: str = "pending", quantity: int = 2, price: int = 1500):
        repo = OrderRepository(db)
        order = repo.create(
            user_id=user_id,
            items=[
                {
                    "product_id": "p1",
                    "product_name": "Золота паста для собак - 15г",
                    "quantity": quantity,
                    "price": price,
                    "total": quantity * price,
                    "size": "15г",
                    "flavor": "",
                }
            ],
            total=quantity * price,
            order_id=order_id,
        )
        if status != "pending":
            order = repo.set_status(order, status)
        return order

    return _make


@pytest.fixture
def login_as(client):
    def _login(user_id: str, email: str | None = None):
        client.cookies.clear()
        r = client.post("/auth/login", json={"userId": user_id, "email": email or email_for(user_id)})
        assert r.status_code == 200, r.text
        return r

    return _login
