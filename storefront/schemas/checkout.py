# storefront/schemas/checkout.py
import uuid

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel

from storefront.schemas.order import OrderSummary
from storefront.schemas.payment_card import CardDetails


class SavedCardCheckout(SQLModel):
    """
    Authenticated checkout with the user's saved card.

    billing_address_id defaults to shipping_address_id.
    """

    model_config = ConfigDict(extra="forbid")

    shipping_address_id: uuid.UUID
    billing_address_id: uuid.UUID | None = None
    cvc: str

    def __repr__(self) -> str:
        return f"SavedCardCheckout(shipping_address_id={self.shipping_address_id})"

    __str__ = __repr__


class NewCardCheckout(CardDetails):
    """
    Authenticated checkout with a card typed now.

    save_card=True stores the card (replacing any saved one) inside the
    same transaction as the order.
    """

    shipping_address_id: uuid.UUID
    billing_address_id: uuid.UUID | None = None
    save_card: bool = False


class GuestCheckout(CardDetails):
    """
    Guest checkout: shipping address typed inline, used for billing too.
    """

    full_name: str
    email: EmailStr | None = None
    phone: str | None = None
    address1: str
    address2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str = "USA"

    @field_validator("full_name", "address1", "city", "state", "postal_code")
    @classmethod
    def address_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CheckoutResponse(SQLModel):
    success: bool = True
    message: str = "Order placed successfully"
    order_summary: OrderSummary
    note: str | None = None
