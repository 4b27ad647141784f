# botanica/api/users.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..dependencies import get_user_service, require_user
from ..models import User
from ..schemas import AddressIn, ProfileIn, address_to_dict, user_to_dict
from ..services import UserService

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/session-check")
def session_check(request: Request):
    user = getattr(request.state, "user", None)
    session = getattr(request.state, "session", None)
    return {
        "hasValidSession": bool(user is not None and session is not None),
        "userId": user.id if user is not None else None,
        "sessionId": session.id if session is not None else None,
    }


@router.get("/profile")
def get_profile(user: User = Depends(require_user), users: UserService = Depends(get_user_service)):
    fresh = users.get_user(user.id) or user
    return {"success": True, "user": user_to_dict(fresh)}


@router.put("/profile")
def update_profile(
    payload: ProfileIn,
    user: User = Depends(require_user),
    users: UserService = Depends(get_user_service),
):
    updated = users.update_profile(user.id, payload)
    return {"success": True, "user": user_to_dict(updated)}


# -------------------
# Delivery addresses
# -------------------
@router.get("/address")
def list_addresses(user: User = Depends(require_user), users: UserService = Depends(get_user_service)):
    return {"success": True, "addresses": [address_to_dict(a) for a in users.list_addresses(user.id)]}


@router.post("/address")
def save_address(
    payload: AddressIn,
    user: User = Depends(require_user),
    users: UserService = Depends(get_user_service),
):
    address = users.save_address(user.id, payload)
    return {"success": True, "address": address_to_dict(address)}


@router.put("/address/{address_id}")
def update_address(
    address_id: str,
    payload: AddressIn,
    user: User = Depends(require_user),
    users: UserService = Depends(get_user_service),
):
    address = users.update_address(user.id, address_id, payload)
    return {"success": True, "address": address_to_dict(address)}


@router.delete("/address/{address_id}")
def delete_address(
    address_id: str,
    user: User = Depends(require_user),
    users: UserService = Depends(get_user_service),
):
    users.delete_address(user.id, address_id)
    return {"success": True, "message": "Address deleted"}
