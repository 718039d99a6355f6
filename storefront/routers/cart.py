# storefront/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import get_or_create_owner, get_owner
from storefront.core.owner import Owner
from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.inventory_repo import InventoryRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartSummary, CartItemCreate, CartItemUpdate
from storefront.services.cart_service import CartService
from storefront.services.inventory_ledger import InventoryLedger

router = APIRouter(prefix="/cart", tags=["Cart"])

service = CartService(
    CartRepository(),
    ProductRepository(),
    InventoryLedger(InventoryRepository()),
)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    owner: Owner = Depends(get_owner),
):
    """
    Get the cart summary for the signed-in customer or X-Guest-Id guest.
    """
    return service.get_cart_summary(session, owner)


@router.post("/items", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    owner: Owner = Depends(get_or_create_owner),
):
    """
    Add a product variant to the cart.

    A guest without X-Guest-Id gets a new id in the response's guest_id.
    """
    return service.add_to_cart(session, owner, payload)


@router.patch("/items/{item_id}", response_model=CartSummary)
def update_cart_item(
    item_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    owner: Owner = Depends(get_owner),
):
    """
    Update quantity of a cart item.
    """
    return service.update_quantity(session, owner, item_id, payload)


@router.delete("/items/{item_id}", response_model=CartSummary)
def remove_cart_item(
    item_id: uuid.UUID,
    session: Session = Depends(get_session),
    owner: Owner = Depends(get_owner),
):
    """
    Remove an item from the cart.
    """
    return service.remove_item(session, owner, item_id)
