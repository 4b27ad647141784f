# botanica/api/orders.py
from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from ..dependencies import get_order_service, is_admin, require_admin, require_user
from ..models import User, utcnow
from ..schemas import OrderCreateIn, StatusIn, order_to_dict
from ..services import OrderService

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("")
def list_orders(user: User = Depends(require_user), orders: OrderService = Depends(get_order_service)):
    rows = orders.list_for_user(user.id)
    return {"success": True, "data": [order_to_dict(o) for o in rows]}


@router.post("", status_code=201)
def create_order(
    payload: OrderCreateIn,
    user: User = Depends(require_user),
    orders: OrderService = Depends(get_order_service),
):
    order = orders.create_order(user.id, payload)
    return {"success": True, "data": order_to_dict(order)}


@router.get("/all")
def list_all_orders(_admin: User = Depends(require_admin), orders: OrderService = Depends(get_order_service)):
    return {"success": True, "data": [order_to_dict(o) for o in orders.list_all()]}


# -------------------
# Sheet sync
# -------------------
@router.post("/sync")
def sync_orders(user: User = Depends(require_user), orders: OrderService = Depends(get_order_service)):
    rows = orders.sync_user_orders(user.id)
    return {
        "success": True,
        "message": "Orders synchronized successfully",
        "data": [order_to_dict(o) for o in rows],
    }


@router.post("/sync-all")
def sync_all_orders(request: Request, background: BackgroundTasks, _admin: User = Depends(require_admin)):
    runner = request.app.state.sync_runner
    if not runner.claim():
        return JSONResponse(
            status_code=409,
            content={
                "success": False,
                "error": "Full sync is already running",
                "timestamp": utcnow().isoformat(),
            },
        )

    background.add_task(runner.run)
    log.info("full sync started")
    return {
        "success": True,
        "message": "Full sync started. Check sync status for progress.",
        "timestamp": utcnow().isoformat(),
    }


@router.get("/sync-all")
def sync_all_status(request: Request, _admin: User = Depends(require_admin)):
    return {"success": True, **request.app.state.sync_runner.status()}


# -------------------
# Single order
# -------------------
@router.get("/{order_id}")
def get_order(
    order_id: str,
    user: User = Depends(require_user),
    admin: bool = Depends(is_admin),
    orders: OrderService = Depends(get_order_service),
):
    order = orders.get_for_user(order_id, user.id, is_admin=admin)
    return {"success": True, "data": order_to_dict(order)}


@router.post("/{order_id}/cancel")
def cancel_order(
    order_id: str,
    user: User = Depends(require_user),
    orders: OrderService = Depends(get_order_service),
):
    orders.cancel(order_id, user.id)
    return {"success": True, "message": "Order cancelled successfully"}


@router.patch("/{order_id}/status")
def update_order_status(
    order_id: str,
    payload: StatusIn,
    user: User = Depends(require_user),
    admin: bool = Depends(is_admin),
    orders: OrderService = Depends(get_order_service),
):
    if not payload.status:
        return JSONResponse(status_code=400, content={"success": False, "error": "Status is required"})

    order = orders.change_status(order_id, payload.status, user.id, is_admin=admin)
    return {"success": True, "message": "Order status updated successfully", "data": order_to_dict(order)}
