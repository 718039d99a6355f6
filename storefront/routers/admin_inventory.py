# storefront/routers/admin_inventory.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.database import get_session
from storefront.repositories.inventory_repo import InventoryRepository
from storefront.schemas.inventory import RestockRequest, StockLevel
from storefront.services.inventory_ledger import InventoryLedger

router = APIRouter(
    prefix="/admin/inventory",
    tags=["Admin - Inventory"],
    dependencies=[Depends(require_admin)],
)

ledger = InventoryLedger(InventoryRepository())


@router.get("/{variant_id}", response_model=StockLevel)
def get_stock(
    variant_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return StockLevel(
        variant_id=variant_id,
        quantity=ledger.check_available(session, variant_id),
    )


@router.patch("/{variant_id}", response_model=StockLevel)
def restock(
    variant_id: uuid.UUID,
    payload: RestockRequest,
    session: Session = Depends(get_session),
):
    """
    Add units to a variant (admin only).
    """
    quantity = ledger.restock(session, variant_id, payload.quantity)
    session.commit()
    return StockLevel(variant_id=variant_id, quantity=quantity)
