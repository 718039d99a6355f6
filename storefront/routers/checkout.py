# storefront/routers/checkout.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_guest, require_user
from storefront.core.owner import GuestOwner, UserOwner
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.address_repo import AddressRepository
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.inventory_repo import InventoryRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.payment_card_repo import PaymentCardRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.checkout import (
    CheckoutResponse,
    GuestCheckout,
    NewCardCheckout,
    SavedCardCheckout,
)
from storefront.services.card_vault import CardVault
from storefront.services.checkout_service import (
    CheckoutService,
    GuestPayment,
    NewCardPayment,
    PaymentMethodResolver,
    SavedCardPayment,
)
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.order_summary import OrderSummaryBuilder
from storefront.services.payment_authorizer import (
    PaymentAuthorizer,
    get_payment_authorizer,
)

router = APIRouter(prefix="/checkout", tags=["Checkout"])

address_repo = AddressRepository()
cart_repo = CartRepository()
order_repo = OrderRepository()
product_repo = ProductRepository()
vault = CardVault(PaymentCardRepository())
ledger = InventoryLedger(InventoryRepository())
summary_builder = OrderSummaryBuilder(order_repo, product_repo, address_repo)
service = CheckoutService(cart_repo, product_repo, order_repo, ledger, summary_builder)


def _respond(session: Session, owner, resolver: PaymentMethodResolver) -> CheckoutResponse:
    summary = service.checkout(session, owner, resolver)
    return CheckoutResponse(order_summary=summary, note=resolver.note)


@router.post(
    "/saved-card",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout_with_saved_card(
    payload: SavedCardCheckout,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
    authorizer: PaymentAuthorizer = Depends(get_payment_authorizer),
):
    """
    Place an order paid with the user's saved card.

    The CVC is re-entered and checked against the stored hash.
    """
    resolver = SavedCardPayment(payload, vault, authorizer, address_repo)
    return _respond(session, UserOwner(current_user.id), resolver)


@router.post(
    "/new-card",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout_with_new_card(
    payload: NewCardCheckout,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
    authorizer: PaymentAuthorizer = Depends(get_payment_authorizer),
):
    """
    Place an order paid with a card typed now (optionally saving it).
    """
    resolver = NewCardPayment(payload, vault, authorizer, address_repo)
    return _respond(session, UserOwner(current_user.id), resolver)


@router.post(
    "/guest",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout_as_guest(
    payload: GuestCheckout,
    session: Session = Depends(get_session),
    guest: GuestOwner = Depends(require_guest),
    authorizer: PaymentAuthorizer = Depends(get_payment_authorizer),
):
    """
    Guest checkout; identity comes from the X-Guest-Id header.
    """
    resolver = GuestPayment(payload, vault, authorizer, address_repo, cart_repo)
    return _respond(session, guest, resolver)
