# storefront/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    A signed-in shopper or an administrator.

    Rows are created on first request with a valid token (see
    core/auth.get_current_user); guests live in guest_users instead.
    Saved cards, addresses and orders hang off users.id.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(primary_key=True, index=True)  # token "sub"

    email: str = Field(unique=True, index=True)
    name: str = Field(max_length=100)

    # "user" shops; "admin" restocks and reviews orders
    role: str = Field(default="user", index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
