# storefront/services/inventory_ledger.py
import logging
import uuid

from sqlmodel import Session

from storefront.core.errors import InsufficientStock, VariantNotFound
from storefront.repositories.inventory_repo import InventoryRepository

logger = logging.getLogger(__name__)


class InventoryLedger:
    """
    Per-variant stock with a non-negative guarantee.

    Responsibilities:
      - report available stock
      - atomically reserve stock for an order line
      - atomically restock (admin)

    Nothing here commits. reserve_and_decrement runs inside the
    checkout transaction; restock is committed by its caller.
    """

    def __init__(self, inventory_repo: InventoryRepository):
        self.inventory_repo = inventory_repo

    def check_available(self, session: Session, variant_id: uuid.UUID) -> int:
        quantity = self.inventory_repo.get_quantity(session, variant_id)
        if quantity is None:
            raise VariantNotFound()
        return quantity

    def reserve_and_decrement(
        self,
        session: Session,
        variant_id: uuid.UUID,
        qty: int,
    ) -> None:
        """
        Take `qty` units in one conditional UPDATE.

        Raises:
            InsufficientStock: fewer than `qty` units remain; carries the
                count observed after the refused update.
            VariantNotFound: the variant row does not exist.
        """
        if qty <= 0:
            raise ValueError("qty must be positive")

        if self.inventory_repo.decrement_if_available(session, variant_id, qty):
            return

        available = self.check_available(session, variant_id)
        logger.info(
            "Stock refused for variant %s: requested=%s available=%s",
            variant_id,
            qty,
            available,
        )
        raise InsufficientStock(variant_id, requested=qty, available=available)

    def restock(self, session: Session, variant_id: uuid.UUID, qty: int) -> int:
        """Add `qty` units and return the new on-hand count."""
        if qty <= 0:
            raise ValueError("qty must be positive")

        if not self.inventory_repo.increment(session, variant_id, qty):
            raise VariantNotFound()

        quantity = self.check_available(session, variant_id)
        logger.info("Restocked variant %s by %s (now %s)", variant_id, qty, quantity)
        return quantity
