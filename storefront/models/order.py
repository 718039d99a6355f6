# storefront/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field

from storefront.core.owner import OWNER_XOR_SQL


class Order(SQLModel, table=True):
    """
    Finalized customer order.

    Orders are immutable once written: money fields are snapshots taken
    at checkout and status is always 'ORDERED'.
    """

    __tablename__ = "orders"
    __table_args__ = (CheckConstraint(OWNER_XOR_SQL, name="ck_orders_owner"),)

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_number: str = Field(
        unique=True,
        index=True,
        max_length=40,
        description="Human-facing id, ORD-<base36 ms>-<4 random>",
    )

    user_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="users.id",
        index=True,
    )

    guest_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="guest_users.id",
        index=True,
    )

    shipping_address_id: uuid.UUID = Field(foreign_key="addresses.id")
    billing_address_id: uuid.UUID = Field(foreign_key="addresses.id")

    subtotal: Decimal = Field(max_digits=10, decimal_places=2)
    tax: Decimal = Field(max_digits=10, decimal_places=2)
    shipping_fee: Decimal = Field(max_digits=10, decimal_places=2)
    total_amount: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="subtotal + tax + shipping_fee",
    )

    status: str = Field(default="ORDERED", index=True)
    payment_method: str = Field(default="DEBIT_CARD")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order; price is the effective unit price paid.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    variant_id: uuid.UUID = Field(foreign_key="inventory.id")

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Unit price at time of order (pre-tax)",
    )


class Payment(SQLModel, table=True):
    """
    Authorized payment for an order (one per order).
    """

    __tablename__ = "payments"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        unique=True,
        index=True,
    )

    amount: Decimal = Field(max_digits=10, decimal_places=2)
    transaction_id: str = Field(max_length=64)
    card_last4: str = Field(max_length=4)
    card_type: str = Field(default="DEBIT", max_length=20)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
