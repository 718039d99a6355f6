# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_user
from storefront.core.owner import UserOwner
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.address_repo import AddressRepository
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.inventory_repo import InventoryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import OrderSummary, ReorderResult
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.order_service import OrderService
from storefront.services.order_summary import OrderSummaryBuilder

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
summary_builder = OrderSummaryBuilder(order_repo, ProductRepository(), AddressRepository())
service = OrderService(
    order_repo,
    cart_repo,
    InventoryLedger(InventoryRepository()),
    summary_builder,
)


@router.get("", response_model=list[OrderSummary])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders, newest first.
    """
    return service.list_orders(session, UserOwner(current_user.id), skip, limit)


@router.get("/{order_id}", response_model=OrderSummary)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Get a single order belonging to the current user.
    """
    return service.get_order(session, UserOwner(current_user.id), order_id)


@router.post("/{order_id}/reorder", response_model=ReorderResult)
def reorder(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Add the items of a past order back into the cart.
    """
    return service.reorder(session, UserOwner(current_user.id), order_id)
