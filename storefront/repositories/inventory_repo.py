# storefront/repositories/inventory_repo.py
import uuid

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.models.product import Variant


class InventoryRepository:
    """
    Single-statement stock mutations on the inventory table.

    NOTE:
      - No commits here; callers own the transaction.
      - Each mutation is one UPDATE whose WHERE clause carries the
        guard, so two racing sessions cannot both pass the check.
    """

    def get_quantity(self, session: Session, variant_id: uuid.UUID) -> int | None:
        stmt = select(Variant.quantity).where(Variant.id == variant_id)
        return session.exec(stmt).first()

    def decrement_if_available(
        self,
        session: Session,
        variant_id: uuid.UUID,
        qty: int,
    ) -> bool:
        """
        quantity -= qty only when quantity >= qty.

        Returns True when the row was updated.
        """
        stmt = (
            update(Variant)
            .where(Variant.id == variant_id, Variant.quantity >= qty)
            .values(quantity=Variant.quantity - qty)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount == 1

    def increment(self, session: Session, variant_id: uuid.UUID, qty: int) -> bool:
        stmt = (
            update(Variant)
            .where(Variant.id == variant_id)
            .values(quantity=Variant.quantity + qty)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount == 1
