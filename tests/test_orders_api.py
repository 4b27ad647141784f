from __future__ import annotations

from botanica.models import Order

from .conftest import ADMIN_EMAIL


def _order_payload(**overrides):
    payload = {
        "items": [
            {"productId": "p1", "productName": "CBD олія для котів 5%", "quantity": 2, "price": 45000, "size": "10мл"},
            {"productId": "p2", "productName": "Заспокійливі ласощі", "quantity": 1, "price": 32000},
        ],
        "total": 122000,
        "customerName": "Олена Коваль",
        "customerPhone": "+380501112233",
        "deliveryAddress": {"useNovaPost": True, "npCityFullName": "Київ", "npWarehouse": "Відділення №5"},
        "notes": "Дзвонити перед доставкою",
    }
    payload.update(overrides)
    return payload


def test_create_and_list_orders(client, login_as, sheet, notifier):
    login_as("u1")
    r = client.post("/api/orders", json=_order_payload())
    assert r.status_code == 201, r.text
    order = r.json()["data"]
    assert len(order["id"]) == 6 and order["id"].isdigit()
    assert order["status"] == "pending"
    assert order["total"] == 122000
    assert order["userEmail"] == "u1@botanica.shop"
    assert [i["total"] for i in order["items"]] == [90000, 32000]
    assert sheet.added == [order["id"]]
    assert notifier.sent == [order["id"]]

    listed = client.get("/api/orders").json()["data"]
    assert [o["id"] for o in listed] == [order["id"]]


def test_create_order_validation(client, login_as):
    login_as("u1")
    r = client.post("/api/orders", json=_order_payload(items=[]))
    assert r.status_code == 400
    assert r.json()["error"] == "Order must contain at least one item"

    r = client.post("/api/orders", json=_order_payload(total=0))
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid order total"

    r = client.post("/api/orders", json=_order_payload(total=1))
    assert r.status_code == 400
    assert r.json()["error"] == "Order total does not match items"

    bad_item = {"productId": "p1", "productName": "x", "quantity": 0, "price": 100}
    r = client.post("/api/orders", json=_order_payload(items=[bad_item], total=None))
    assert r.status_code == 400


def test_malformed_body_is_400(client, login_as):
    login_as("u1")
    r = client.post("/api/orders", json={"items": "nope"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Invalid request body"}


def test_sink_failures_do_not_fail_the_order(client, login_as, app):
    from .conftest import RecordingNotifier, RecordingSheet

    app.state.order_sheet = RecordingSheet(fail=True)
    app.state.notifier = RecordingNotifier(fail=True)
    login_as("u1")
    r = client.post("/api/orders", json=_order_payload())
    assert r.status_code == 201


def test_owner_cancels_example_order(client, make_user, make_order, login_as, db, sheet):
    make_user("u1")
    make_user("u2")
    make_order("u1", order_id="806039")

    login_as("u2")
    r = client.post("/api/orders/806039/cancel")
    assert r.status_code == 403
    assert r.json()["error"] == "Access denied"

    login_as("u1")
    r = client.post("/api/orders/806039/cancel")
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Order cancelled successfully"}

    db.expire_all()
    assert db.get(Order, "806039").status == "cancelled"
    assert sheet.statuses == [("806039", "cancelled")]

    r = client.post("/api/orders/806039/cancel")
    assert r.status_code == 400
    assert r.json()["error"] == "Order is already cancelled"


def test_cannot_cancel_delivered_order(client, make_user, make_order, login_as):
    make_user("u1")
    make_order("u1", order_id="111111", status="confirmed")
    login_as("u1")
    assert client.patch("/api/orders/111111/status", json={"status": "delivered"}).status_code == 200

    r = client.post("/api/orders/111111/cancel")
    assert r.status_code == 400
    assert r.json()["error"] == "Cannot cancel delivered order"

    r = client.patch("/api/orders/111111/status", json={"status": "pending"})
    assert r.status_code == 400


def test_missing_order_is_404(client, login_as):
    login_as("u1")
    assert client.post("/api/orders/000000/cancel").status_code == 404
    assert client.get("/api/orders/000000").status_code == 404


def test_only_owner_or_admin_can_view(client, make_user, make_order, login_as):
    make_user("u1")
    make_user("u2")
    make_order("u1", order_id="222222")

    login_as("u2")
    assert client.get("/api/orders/222222").status_code == 403

    login_as("u1")
    assert client.get("/api/orders/222222").json()["data"]["userId"] == "u1"

    login_as("admin", ADMIN_EMAIL)
    assert client.get("/api/orders/222222").status_code == 200


def test_status_update_rules(client, make_user, make_order, login_as):
    make_user("u1")
    make_order("u1", order_id="333333")

    login_as("u2")
    assert client.patch("/api/orders/333333/status", json={"status": "confirmed"}).status_code == 403

    login_as("admin", ADMIN_EMAIL)
    assert client.patch("/api/orders/333333/status", json={}).json()["error"] == "Status is required"
    assert client.patch("/api/orders/333333/status", json={"status": "lost"}).json()["error"] == "Invalid order status"

    r = client.patch("/api/orders/333333/status", json={"status": "confirmed"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "confirmed"


def test_admin_lists_all_orders(client, make_user, make_order, login_as):
    make_user("u1")
    make_user("u2")
    make_order("u1")
    make_order("u2")

    login_as("u1")
    assert client.get("/api/orders/all").status_code == 403
    assert len(client.get("/api/orders").json()["data"]) == 1

    login_as("admin", ADMIN_EMAIL)
    assert len(client.get("/api/orders/all").json()["data"]) == 2


def test_user_sync_pushes_own_orders(client, make_user, make_order, login_as, sheet):
    make_user("u1")
    make_user("u2")
    mine = make_order("u1")
    make_order("u2")

    login_as("u1")
    r = client.post("/api/orders/sync")
    assert r.status_code == 200
    assert [o["id"] for o in r.json()["data"]] == [mine.id]
    assert sheet.added == [mine.id]


def test_full_sync_runs_in_background(client, make_user, make_order, login_as, sheet):
    make_user("u1")
    a = make_order("u1")
    b = make_order("u1")

    login_as("u1")
    assert client.post("/api/orders/sync-all").status_code == 403

    login_as("admin", ADMIN_EMAIL)
    r = client.post("/api/orders/sync-all")
    assert r.status_code == 200
    assert r.json()["success"] is True

    # TestClient runs background tasks before returning
    status = client.get("/api/orders/sync-all").json()
    assert status["running"] is False
    assert status["report"]["synced"] == 2
    assert sorted(sheet.added) == sorted([a.id, b.id])
    assert sheet.kept == sorted([a.id, b.id])


def test_full_sync_refuses_concurrent_trigger(client, login_as, app):
    login_as("admin", ADMIN_EMAIL)
    assert app.state.sync_runner.claim() is True

    r = client.post("/api/orders/sync-all")
    assert r.status_code == 409
    assert r.json()["success"] is False
