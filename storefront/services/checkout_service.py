# storefront/services/checkout_service.py
import enum
import logging
import secrets
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from storefront.core.errors import (
    AddressNotFound,
    EmptyCart,
    InsufficientStock,
    OrderNotCompleted,
    StorageUnavailable,
    VariantNotFound,
)
from storefront.core.owner import Owner, owner_columns
from storefront.models.address import Address
from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem, Payment
from storefront.repositories.address_repo import AddressRepository
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.checkout import GuestCheckout, NewCardCheckout, SavedCardCheckout
from storefront.schemas.order import OrderSummary
from storefront.services.card_vault import CardVault
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.order_summary import OrderSummaryBuilder
from storefront.services.payment_authorizer import Authorization, PaymentAuthorizer
from storefront.services.pricing import Totals, compute_totals, effective_price

logger = logging.getLogger(__name__)

BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
ORDER_NUMBER_ATTEMPTS = 5


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(BASE36[r])
    return "".join(reversed(out))


def generate_order_number() -> str:
    """ORD-<base36 epoch ms>-<4 random base36 chars>"""
    suffix = "".join(secrets.choice(BASE36) for _ in range(4))
    return f"ORD-{_base36(int(time.time() * 1000))}-{suffix}"


class CheckoutState(str, enum.Enum):
    START = "START"
    CART_LOADED = "CART_LOADED"
    PRICE_COMPUTED = "PRICE_COMPUTED"
    PAYMENT_VERIFIED = "PAYMENT_VERIFIED"
    ORDER_PERSISTED = "ORDER_PERSISTED"
    INVENTORY_DECREMENTED = "INVENTORY_DECREMENTED"
    CART_CLEARED = "CART_CLEARED"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class CheckoutAttempt:
    """In-memory progress of one checkout; never persisted."""

    owner: Owner
    variant: str
    state: CheckoutState = CheckoutState.START
    order_number: str | None = None

    def advance(self, state: CheckoutState) -> None:
        logger.debug(
            "Checkout %s [%s] %s -> %s",
            self.order_number,
            self.variant,
            self.state.value,
            state.value,
        )
        self.state = state

    def fail(self) -> CheckoutState:
        """Move to FAILED and return the last state reached before the error."""
        reached = self.state
        self.advance(CheckoutState.FAILED)
        return reached


@dataclass(frozen=True)
class PricedLine:
    item: CartItem
    unit_price: Decimal


# -------- Payment method resolvers --------


class PaymentMethodResolver(ABC):
    """
    The part of checkout that differs between saved-card, new-card and
    guest checkout: where the addresses come from and how payment is
    taken.
    """

    name: str = ""
    note: str | None = None

    @abstractmethod
    def resolve_addresses(
        self,
        session: Session,
        owner: Owner,
    ) -> tuple[uuid.UUID, uuid.UUID]:
        """Return (shipping_address_id, billing_address_id)."""

    @abstractmethod
    def pay(self, session: Session, owner: Owner, amount: Decimal) -> Authorization:
        """Verify / authorize payment for `amount`. Vault errors pass through."""


class _AccountAddresses:
    """Address lookup for authenticated checkouts: ids must belong to the user."""

    def __init__(self, address_repo: AddressRepository, shipping_id, billing_id):
        self.address_repo = address_repo
        self.shipping_id = shipping_id
        self.billing_id = billing_id or shipping_id

    def resolve(self, session: Session, owner: Owner) -> tuple[uuid.UUID, uuid.UUID]:
        for address_id in {self.shipping_id, self.billing_id}:
            address = self.address_repo.get_by_id(session, address_id)
            if address is None or address.user_id != owner.id:
                raise AddressNotFound()
        return self.shipping_id, self.billing_id


class SavedCardPayment(PaymentMethodResolver):
    name = "saved-card"

    def __init__(
        self,
        payload: SavedCardCheckout,
        vault: CardVault,
        authorizer: PaymentAuthorizer,
        address_repo: AddressRepository,
    ):
        self.payload = payload
        self.vault = vault
        self.authorizer = authorizer
        self.addresses = _AccountAddresses(
            address_repo, payload.shipping_address_id, payload.billing_address_id
        )

    def resolve_addresses(self, session, owner):
        return self.addresses.resolve(session, owner)

    def pay(self, session, owner, amount):
        verified = self.vault.verify_saved_card(session, owner.id, self.payload.cvc)
        return self.authorizer.authorize_tokenized(verified.last4, amount)


class NewCardPayment(PaymentMethodResolver):
    name = "new-card"

    def __init__(
        self,
        payload: NewCardCheckout,
        vault: CardVault,
        authorizer: PaymentAuthorizer,
        address_repo: AddressRepository,
    ):
        self.payload = payload
        self.vault = vault
        self.authorizer = authorizer
        self.addresses = _AccountAddresses(
            address_repo, payload.shipping_address_id, payload.billing_address_id
        )

    def resolve_addresses(self, session, owner):
        return self.addresses.resolve(session, owner)

    def pay(self, session, owner, amount):
        p = self.payload
        auth = self.vault.authorize_one_time(
            p.card_number, p.expiry, p.cvc, p.card_type, amount, self.authorizer
        )
        if p.save_card:
            self.vault.tokenize_and_store(
                session, owner.id, p.card_number, p.expiry, p.cvc, p.card_type
            )
        return auth


class GuestPayment(PaymentMethodResolver):
    name = "guest"
    note = "Create an account to track your orders and save your payment details."

    def __init__(
        self,
        payload: GuestCheckout,
        vault: CardVault,
        authorizer: PaymentAuthorizer,
        address_repo: AddressRepository,
        cart_repo: CartRepository,
    ):
        self.payload = payload
        self.vault = vault
        self.authorizer = authorizer
        self.address_repo = address_repo
        self.cart_repo = cart_repo

    def resolve_addresses(self, session, owner):
        p = self.payload
        address = self.address_repo.create(
            session,
            Address(
                user_id=None,
                full_name=p.full_name,
                phone=p.phone,
                address1=p.address1,
                address2=p.address2,
                city=p.city,
                state=p.state,
                postal_code=p.postal_code,
                country=p.country,
            ),
        )
        if p.email:
            self.cart_repo.record_guest_email(session, owner.id, p.email)
        return address.id, address.id

    def pay(self, session, owner, amount):
        p = self.payload
        return self.vault.authorize_one_time(
            p.card_number, p.expiry, p.cvc, p.card_type, amount, self.authorizer
        )


# -------- Orchestrator --------


class CheckoutService:
    """
    Turns an owner's cart into an order.

    Steps (one transaction, committed only at the end):
      1. Load the cart; EmptyCart if it has no items.
      2. Price each line from the live product.
      3. Check stock for every line (InsufficientStock before payment).
      4. Resolve addresses and take payment via the resolver.
      5. Insert the Order with a unique order number.
      6. Insert each OrderItem and decrement its variant.
      7. Insert the Payment.
      8. Clear the cart.
      9. Commit and build the order summary.

    Any failure rolls back everything written by the attempt.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        order_repo: OrderRepository,
        ledger: InventoryLedger,
        summary_builder: OrderSummaryBuilder,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.order_repo = order_repo
        self.ledger = ledger
        self.summary_builder = summary_builder

    def checkout(
        self,
        session: Session,
        owner: Owner,
        resolver: PaymentMethodResolver,
    ) -> OrderSummary:
        attempt = CheckoutAttempt(owner=owner, variant=resolver.name)
        try:
            order = self._place_order(session, attempt, resolver)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            failed_at = attempt.fail()
            logger.error(
                "Checkout [%s] storage failure after %s: %s",
                resolver.name,
                failed_at.value,
                type(exc).__name__,
            )
            raise StorageUnavailable() from exc
        except Exception as exc:
            session.rollback()
            failed_at = attempt.fail()
            logger.info(
                "Checkout [%s] failed after %s: %s",
                resolver.name,
                failed_at.value,
                type(exc).__name__,
            )
            raise

        attempt.advance(CheckoutState.DONE)
        logger.info(
            "Order %s placed [%s] total=%s",
            order.order_number,
            resolver.name,
            order.total_amount,
        )
        session.refresh(order)
        return self.summary_builder.build(session, order)

    # -------- steps --------

    def _place_order(
        self,
        session: Session,
        attempt: CheckoutAttempt,
        resolver: PaymentMethodResolver,
    ) -> Order:
        owner = attempt.owner

        # 1) Cart
        cart = self.cart_repo.get_for_owner(session, owner)
        items = self.cart_repo.list_items(session, cart.id) if cart else []
        if not items:
            raise EmptyCart()
        attempt.advance(CheckoutState.CART_LOADED)

        # 2) Live prices + 3) stock pre-check
        lines = self._price_lines(session, items)
        for line in lines:
            available = self.ledger.check_available(session, line.item.variant_id)
            if available < line.item.quantity:
                raise InsufficientStock(
                    line.item.variant_id,
                    requested=line.item.quantity,
                    available=available,
                )
        totals = compute_totals((ln.unit_price, ln.item.quantity) for ln in lines)
        attempt.advance(CheckoutState.PRICE_COMPUTED)

        # 4) Addresses + payment
        shipping_id, billing_id = resolver.resolve_addresses(session, owner)
        authorization = resolver.pay(session, owner, totals.total)
        attempt.advance(CheckoutState.PAYMENT_VERIFIED)

        # 5) Order
        order = self._insert_order(session, owner, shipping_id, billing_id, totals)
        attempt.order_number = order.order_number
        attempt.advance(CheckoutState.ORDER_PERSISTED)

        # 6) Items + stock
        for line in lines:
            self.order_repo.create_item(
                session,
                OrderItem(
                    order_id=order.id,
                    product_id=line.item.product_id,
                    variant_id=line.item.variant_id,
                    quantity=line.item.quantity,
                    price=line.unit_price,
                ),
            )
            try:
                self.ledger.reserve_and_decrement(
                    session, line.item.variant_id, line.item.quantity
                )
            except InsufficientStock as exc:
                raise OrderNotCompleted(exc) from exc
        attempt.advance(CheckoutState.INVENTORY_DECREMENTED)

        # 7) Payment record
        self.order_repo.create_payment(
            session,
            Payment(
                order_id=order.id,
                amount=totals.total,
                transaction_id=authorization.transaction_id,
                card_last4=authorization.last4,
                card_type="DEBIT",
            ),
        )

        # 8) Cart
        self.cart_repo.clear_items(session, cart.id)
        attempt.advance(CheckoutState.CART_CLEARED)

        return order

    def _price_lines(self, session: Session, items: list[CartItem]) -> list[PricedLine]:
        products = self.product_repo.get_many(
            session, list({it.product_id for it in items})
        )
        lines: list[PricedLine] = []
        for it in items:
            product = products.get(it.product_id)
            if product is None:
                raise VariantNotFound()
            lines.append(PricedLine(item=it, unit_price=effective_price(product)))
        return lines

    def _insert_order(
        self,
        session: Session,
        owner: Owner,
        shipping_id: uuid.UUID,
        billing_id: uuid.UUID,
        totals: Totals,
    ) -> Order:
        order_number = generate_order_number()
        for _ in range(ORDER_NUMBER_ATTEMPTS - 1):
            if not self.order_repo.order_number_exists(session, order_number):
                break
            order_number = generate_order_number()

        order = Order(
            order_number=order_number,
            shipping_address_id=shipping_id,
            billing_address_id=billing_id,
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping_fee=totals.shipping,
            total_amount=totals.total,
            status="ORDERED",
            payment_method="DEBIT_CARD",
            **owner_columns(owner),
        )
        return self.order_repo.create_order(session, order)

