# storefront/schemas/inventory.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class RestockRequest(SQLModel):
    """
    Admin payload to add units to a variant.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(gt=0, description="Units to add")


class StockLevel(SQLModel):
    variant_id: uuid.UUID
    quantity: int
