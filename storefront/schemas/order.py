# storefront/schemas/order.py
import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlmodel import SQLModel


class AddressRead(SQLModel):
    id: uuid.UUID
    full_name: str
    phone: str | None = None
    address1: str
    address2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class OrderSummaryItem(SQLModel):
    """
    Representation of a single order line item.
    """

    product_id: uuid.UUID
    variant_id: uuid.UUID
    name: str | None
    color: str | None
    size: str | None
    image_url: str | None
    price: Decimal
    quantity: int
    subtotal: Decimal


class PriceBreakdown(SQLModel):
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


class PaymentReceipt(SQLModel):
    method: str
    card_type: str | None = None
    card_last4: str | None = None
    transaction_id: str | None = None
    amount: Decimal | None = None
    message: str | None = None


class OrderSummary(SQLModel):
    """
    Full order view returned after checkout and in order history.
    """

    order_id: uuid.UUID
    order_number: str
    status: str
    order_date: datetime
    estimated_delivery: date
    estimated_delivery_message: str
    items: list[OrderSummaryItem]
    item_count: int
    price_breakdown: PriceBreakdown
    payment: PaymentReceipt
    shipping_address: AddressRead | None
    billing_address: AddressRead | None


class ReorderResult(SQLModel):
    message: str
    added: list[uuid.UUID]
    out_of_stock: list[uuid.UUID]


# -------- Admin views --------


class CustomerInfo(SQLModel):
    customer_type: str  # "REGISTERED" | "GUEST"
    name: str
    email: str | None = None
    phone: str | None = None


class AdminOrderRow(SQLModel):
    """
    One line of the admin order list.
    """

    order_id: uuid.UUID
    order_number: str
    status: str
    order_date: datetime
    customer: CustomerInfo
    total_amount: Decimal
    item_count: int
    shipping_location: str | None


class AdminOrderDetail(OrderSummary):
    customer: CustomerInfo
