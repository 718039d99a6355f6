# storefront/core/owner.py
"""
Who a cart or an order belongs to.

Storage keeps two nullable columns (user_id, guest_id) guarded by an
XOR CHECK; in code an owner is always exactly one of these two types.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class UserOwner:
    id: uuid.UUID


@dataclass(frozen=True)
class GuestOwner:
    id: uuid.UUID


Owner = Union[UserOwner, GuestOwner]

# SQL fragment shared by every table with an owner pair
OWNER_XOR_SQL = (
    "(user_id IS NOT NULL AND guest_id IS NULL) "
    "OR (user_id IS NULL AND guest_id IS NOT NULL)"
)


def owner_columns(owner: Owner) -> dict[str, uuid.UUID | None]:
    """Column values to store for `owner`."""
    if isinstance(owner, UserOwner):
        return {"user_id": owner.id, "guest_id": None}
    return {"user_id": None, "guest_id": owner.id}


def owner_filter(model: Any, owner: Owner):
    """WHERE clause matching rows of `model` owned by `owner`."""
    if isinstance(owner, UserOwner):
        return model.user_id == owner.id
    return model.guest_id == owner.id


def owner_of(row: Any) -> Owner:
    if row.user_id is not None:
        return UserOwner(row.user_id)
    return GuestOwner(row.guest_id)
