# storefront/models/payment_card.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class PaymentCard(SQLModel, table=True):
    """
    A user's saved debit card (at most one per user).

    Storage:
      - segment1..4_encrypted: the 16-digit number as four Fernet tokens
      - expiry_encrypted: "MM/YYYY" as a Fernet token
      - last4_plain: for "ending in 1234" displays
      - cvc_hash / cvc_salt: bcrypt hash and its salt, never reversible

    Rows written before CVC hashing existed have NULL hash/salt and
    cannot be used for saved-card checkout.
    """

    __tablename__ = "payment_cards"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        unique=True,
        index=True,
    )

    segment1_encrypted: str
    segment2_encrypted: str
    segment3_encrypted: str
    segment4_encrypted: str
    expiry_encrypted: str

    last4_plain: str = Field(max_length=4)
    card_type: str = Field(default="DEBIT", max_length=20)

    cvc_hash: str | None = Field(default=None)
    cvc_salt: str | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
