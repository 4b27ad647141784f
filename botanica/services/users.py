# botanica/services/users.py
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

from ..errors import AccessDenied, NotFound, ValidationFailed
from ..models import DeliveryAddress, User
from ..repositories import UserRepository
from ..schemas import AddressIn, ProfileIn

log = logging.getLogger(__name__)


class UserService:
    def __init__(self, users: UserRepository):
        self.users = users

    def get_user(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def create_user(self, email: str, user_id: str | None = None) -> User:
        """Create a user; a duplicate id or email raises Conflict."""
        if not (email or "").strip():
            raise ValidationFailed("Email is required")
        return self.users.create(user_id or str(uuid.uuid4()), email)

    def get_or_create(self, user_id: str, email: str) -> User:
        """Resolve a login from the auth provider to our user row.

        Email is the stable key: the provider id only seeds new rows.
        """
        if not (user_id or "").strip():
            raise ValidationFailed("User ID is required")
        if not (email or "").strip():
            raise ValidationFailed("Email is required")

        user = self.users.get_by_email(email)
        if user:
            return user

        user_id = user_id.strip()
        if self.users.get(user_id):
            # id belongs to another account; never resolve a login by id
            log.warning("user id %s already taken, creating %s under a new id", user_id, email)
            user_id = str(uuid.uuid4())

        log.info("creating user %s <%s>", user_id, email)
        return self.create_user(email, user_id)

    def update_profile(self, user_id: str, data: ProfileIn) -> User:
        first = (data.first_name or "").strip()
        last = (data.last_name or "").strip()
        phone = (data.phone_number or "").strip()
        if not first or not last or not phone:
            raise ValidationFailed("All fields are required")

        user = self.users.update_profile(user_id, first, last, phone)
        if not user:
            raise NotFound("User not found")
        return user

    # -------------------
    # Delivery addresses
    # -------------------
    def list_addresses(self, user_id: str) -> List[DeliveryAddress]:
        return self.users.addresses(user_id)

    def save_address(self, user_id: str, data: AddressIn) -> DeliveryAddress:
        fields = _address_fields(data)
        if not self.users.addresses(user_id):
            # first address becomes the default
            fields["is_default"] = True
        return self.users.create_address(user_id, fields)

    def update_address(self, user_id: str, address_id: str, data: AddressIn) -> DeliveryAddress:
        address = self._owned_address(user_id, address_id)
        return self.users.update_address(address, _address_fields(data))

    def delete_address(self, user_id: str, address_id: str) -> None:
        address = self._owned_address(user_id, address_id)
        self.users.delete_address(address)

    def _owned_address(self, user_id: str, address_id: str) -> DeliveryAddress:
        address = self.users.get_address(address_id)
        if not address:
            raise NotFound("Address not found")
        if address.user_id != user_id:
            raise AccessDenied("Access denied")
        return address


def _address_fields(data: AddressIn) -> Dict[str, Any]:
    name = (data.name or "").strip()
    if not name:
        raise ValidationFailed("All required fields must be provided")

    if data.use_nova_post:
        if not data.np_city_name or not data.np_city_full_name or not data.np_warehouse:
            raise ValidationFailed("All required fields must be provided")
        return {
            "name": name,
            "is_default": bool(data.is_default),
            "street": "",
            "city": "",
            "postal_code": "",
            "country": "Ukraine",
            "np_city_name": data.np_city_name.strip(),
            "np_city_full_name": data.np_city_full_name.strip(),
            "np_warehouse": data.np_warehouse.strip(),
            "use_nova_post": True,
        }

    if not (data.street or "").strip() or not (data.city or "").strip():
        raise ValidationFailed("All required fields must be provided")
    return {
        "name": name,
        "is_default": bool(data.is_default),
        "street": data.street.strip(),
        "city": data.city.strip(),
        "postal_code": (data.postal_code or "").strip(),
        "country": (data.country or "").strip() or "Ukraine",
        "np_city_name": None,
        "np_city_full_name": None,
        "np_warehouse": None,
        "use_nova_post": False,
    }
