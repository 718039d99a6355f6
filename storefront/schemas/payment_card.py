# storefront/schemas/payment_card.py
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel


class CardDetails(SQLModel):
    """
    Full card as typed by the customer.

    Only presence is checked here; Luhn / expiry / CVC rules live in the
    card vault so every entry point reports them the same way.
    """

    model_config = ConfigDict(extra="forbid")

    card_number: str
    expiry: str  # MM/YYYY
    cvc: str
    card_type: str = "DEBIT"

    @field_validator("card_number", "expiry", "cvc", "card_type")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    def __repr__(self) -> str:
        # Keep card data out of tracebacks and debug logs.
        return f"CardDetails(card_type={self.card_type!r})"

    __str__ = __repr__


class PaymentCardRead(SQLModel):
    """
    Masked view of the saved card. Never carries the number or CVC.
    """

    has_saved_card: bool
    masked_number: str | None = None
    last4: str | None = None
    card_type: str | None = None
    saved_at: datetime | None = None


class PaymentCardSaved(SQLModel):
    message: str
    card: PaymentCardRead
