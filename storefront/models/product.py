# storefront/models/product.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry for a shoe.

    Pricing:
      - selling_price is the list price
      - when on_sale, sale_price must be set and strictly lower
        (DB CHECK ck_products_sale_price)
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint(
            "NOT on_sale OR (sale_price IS NOT NULL AND sale_price < selling_price)",
            name="ck_products_sale_price",
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=150,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(default=None)

    category: str | None = Field(
        default=None,
        max_length=50,
        index=True,
    )

    cost_price: Decimal | None = Field(
        default=None,
        max_digits=10,
        decimal_places=2,
    )

    selling_price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="List price",
    )

    on_sale: bool = Field(default=False, index=True)

    sale_price: Decimal | None = Field(
        default=None,
        max_digits=10,
        decimal_places=2,
        description="Discounted price; required while on_sale",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class Color(SQLModel, table=True):
    __tablename__ = "colors"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    value: str = Field(max_length=30, unique=True)


class Size(SQLModel, table=True):
    __tablename__ = "sizes"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    value: str = Field(max_length=10, unique=True)


class Variant(SQLModel, table=True):
    """
    Stock row for one (product, color, size) combination.

    quantity is only changed through the inventory ledger
    (services/inventory_ledger.py), never by assigning the attribute.
    """

    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("product_id", "color_id", "size_id", name="uq_inventory_variant"),
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        ondelete="CASCADE",
        index=True,
    )

    color_id: uuid.UUID = Field(foreign_key="colors.id")
    size_id: uuid.UUID = Field(foreign_key="sizes.id")

    quantity: int = Field(
        default=0,
        description="Units on hand (never negative)",
    )


class ProductImage(SQLModel, table=True):
    """
    Gallery image for a product.

    color_id = NULL means the image applies to every color.
    priority 1 is the main image.
    """

    __tablename__ = "product_images"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        ondelete="CASCADE",
        index=True,
    )

    color_id: uuid.UUID | None = Field(default=None, foreign_key="colors.id")

    image_url: str
    alt_text: str | None = None

    priority: int = Field(
        default=1,
        ge=1,
        description="Ordering index within the gallery (1 = main)",
    )
