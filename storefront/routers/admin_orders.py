# storefront/routers/admin_orders.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.database import get_session
from storefront.repositories.address_repo import AddressRepository
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.inventory_repo import InventoryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import AdminOrderDetail, AdminOrderRow
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.order_service import OrderService
from storefront.services.order_summary import OrderSummaryBuilder

router = APIRouter(
    prefix="/admin/orders",
    tags=["Admin - Orders"],
    dependencies=[Depends(require_admin)],
)

order_repo = OrderRepository()
service = OrderService(
    order_repo,
    CartRepository(),
    InventoryLedger(InventoryRepository()),
    OrderSummaryBuilder(order_repo, ProductRepository(), AddressRepository()),
)


@router.get("", response_model=list[AdminOrderRow])
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    All orders, registered and guest, newest first.
    """
    return service.list_all_orders(session, skip, limit)


@router.get("/{order_id}", response_model=AdminOrderDetail)
def get_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_any_order(session, order_id)
