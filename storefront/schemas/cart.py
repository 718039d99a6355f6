# storefront/schemas/cart.py
import uuid
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    The variant is identified the way the product page shows it:
    product + color value + size value.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    color: str
    size: str
    quantity: int = Field(default=1, gt=0)

    @field_validator("color", "size")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(gt=0)


class CartItemRead(SQLModel):
    """
    Read model for a single cart item, priced from the live product.
    """

    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: uuid.UUID
    name: str | None
    color: str | None
    size: str | None
    image_url: str | None
    unit_price: Decimal
    quantity: int
    available_stock: int
    line_total: Decimal


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    guest_id: uuid.UUID | None = None
    items: list[CartItemRead]
    total_quantity: int
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
