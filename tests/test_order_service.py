from __future__ import annotations

import pytest

from botanica.dependencies import build_order_service
from botanica.errors import Conflict, NotFound, ValidationFailed
from botanica.integrations.notifier import format_order_message
from botanica.repositories import OrderRepository, PromoCodeRepository
from botanica.schemas import OrderCreateIn, OrderItemIn
from botanica.services import PromoCodeService


@pytest.fixture
def service(db, app):
    return build_order_service(db, app.state)


def _order(**overrides):
    data = {
        "items": [OrderItemIn(product_id="p1", product_name="CBD олія 10%", quantity=2, price=50000)],
        "customer_phone": "+380671234567",
        "delivery_address": {"useNovaPost": False, "street": "вул. Хрещатик 1", "city": "Київ"},
    }
    data.update(overrides)
    return OrderCreateIn(**data)


def test_order_defaults_customer_from_profile(service, make_user, db):
    user = make_user("u1")
    user.first_name, user.last_name = "Олена", "Коваль"
    db.commit()

    order = service.create_order("u1", _order(customer_name=None))
    assert order.customer_name == "Олена Коваль"
    assert order.user_email == "u1@botanica.shop"
    assert order.total == 100000
    assert order.items[0].total == 100000


def test_unknown_user_cannot_order(service):
    with pytest.raises(NotFound):
        service.create_order("ghost", _order())


def test_order_ids_retry_until_unique(db, make_user):
    make_user("u1")
    ids = iter(["123456", "123456", "654321"])
    repo = OrderRepository(db, id_factory=lambda: next(ids))
    item = {"product_id": "p", "product_name": "x", "quantity": 1, "price": 100, "total": 100}

    assert repo.create("u1", [dict(item)], 100).id == "123456"
    assert repo.create("u1", [dict(item)], 100).id == "654321"


def test_order_id_generation_gives_up(db, make_user):
    make_user("u1")
    item = {"product_id": "p", "product_name": "x", "quantity": 1, "price": 100, "total": 100}
    OrderRepository(db).create("u1", [dict(item)], 100, order_id="999999")

    repo = OrderRepository(db, id_factory=lambda: "999999")
    with pytest.raises(Conflict, match="Failed to generate unique order ID"):
        repo.create("u1", [dict(item)], 100)


def test_promo_discount_is_applied_once_per_user(service, make_user, db):
    make_user("u1")
    PromoCodeService(PromoCodeRepository(db)).create("percentage", 10, code="welcome10")

    order = service.create_order("u1", _order(promo_code="WELCOME10", total=90000))
    assert order.total == 90000
    assert order.discount == 10000
    assert order.promo_code == "WELCOME10"

    with pytest.raises(ValidationFailed, match="already used"):
        service.create_order("u1", _order(promo_code="WELCOME10"))


def test_unknown_promo_code_rejects_order(service, make_user):
    make_user("u1")
    with pytest.raises(ValidationFailed, match="Promo code not found"):
        service.create_order("u1", _order(promo_code="NOPE"))


def test_full_sync_counts_failures(db, make_user, make_order, app):
    class FlakySheet:
        def __init__(self):
            self.cleaned = None

        def add_order(self, order):
            if order.id == "100001":
                raise RuntimeError("quota exceeded")

        def cleanup(self, keep_ids):
            self.cleaned = set(keep_ids)
            return 3

    make_user("u1")
    make_order("u1", order_id="100001")
    make_order("u1", order_id="100002")

    app.state.order_sheet = FlakySheet()
    report = build_order_service(db, app.state).sync_all_orders()

    assert report.as_dict() == {"total": 2, "synced": 1, "failed": 1, "removed": 3, "failedIds": ["100001"]}
    assert app.state.order_sheet.cleaned == {"100001", "100002"}


def test_full_sync_pauses_between_orders(db, make_user, make_order, app):
    make_user("u1")
    make_order("u1")
    make_order("u1")
    make_order("u1")

    service = build_order_service(db, app.state)
    pauses = []
    service.sync_delay_seconds = 0.1
    service.sleep = pauses.append
    service.sync_all_orders()
    assert pauses == [0.1, 0.1]


def test_order_message_mentions_everything(service, make_user):
    make_user("u1")
    order = service.create_order("u1", _order(customer_name="Іван", notes="після 18:00"))
    text = format_order_message(order)
    assert order.id in text
    assert "Іван" in text
    assert "вул. Хрещатик 1, Київ" in text
    assert "2 шт. × 500.00 ₴ = 1000.00 ₴" in text
    assert "після 18:00" in text


def test_full_sync_keeps_report_when_cleanup_fails(db, make_user, make_order, app):
    class NoCleanupSheet:
        def add_order(self, order):
            pass

        def cleanup(self, keep_ids):
            raise RuntimeError("sheet quota")

    make_user("u1")
    make_order("u1")
    make_order("u1")

    app.state.order_sheet = NoCleanupSheet()
    app.state.sync_runner.claim()
    app.state.sync_runner.run()

    status = app.state.sync_runner.status()
    assert status["error"] is None
    assert status["report"]["synced"] == 2
    assert status["report"]["removed"] == 0


def test_user_sync_fills_blank_customer_fields_from_sheet(db, make_user, make_order, app):
    class FilledSheet:
        def __init__(self):
            self.added = []

        def rows(self):
            return [
                {"Order ID": "555555", "Client Name": "Марія Шевченко", "Phone Number": "+380931234567", "Email": "x@botanica.shop"}
            ]

        def add_order(self, order):
            self.added.append(order.id)

    make_user("u1")
    make_order("u1", order_id="555555")
    app.state.order_sheet = FilledSheet()

    orders = build_order_service(db, app.state).sync_user_orders("u1")
    assert app.state.order_sheet.added == ["555555"]

    db.expire_all()
    order = OrderRepository(db).get("555555")
    assert orders[0].id == order.id
    assert order.customer_name == "Марія Шевченко"
    assert order.customer_phone == "+380931234567"
    assert order.user_email == "x@botanica.shop"


def test_user_sync_never_overwrites_stored_fields(db, make_user, make_order, app):
    class OtherSheet:
        def rows(self):
            return [{"Order ID": "666666", "Client Name": "Інша Людина", "Phone Number": "", "Email": ""}]

        def add_order(self, order):
            pass

    make_user("u1")
    order = make_order("u1", order_id="666666")
    OrderRepository(db).update_fields(order, customer_name="Олена Коваль")
    app.state.order_sheet = OtherSheet()

    build_order_service(db, app.state).sync_user_orders("u1")
    db.expire_all()
    assert OrderRepository(db).get("666666").customer_name == "Олена Коваль"
