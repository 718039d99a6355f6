# storefront/repositories/cart_repo.py
import uuid

from sqlalchemy import delete
from sqlmodel import Session, select

from storefront.core.owner import GuestOwner, Owner, owner_columns, owner_filter
from storefront.models.cart import Cart, CartItem, GuestUser


class CartRepository:
    """
    Data access layer for carts, cart_items and guest_users.

    NOTE:
      - Writes flush but never commit; CartService commits for cart
        edits and CheckoutService commits the checkout transaction.
    """

    # ---- Guests ----

    def create_guest(self, session: Session) -> GuestOwner:
        guest = GuestUser()
        session.add(guest)
        session.flush()
        return GuestOwner(guest.id)

    def guest_exists(self, session: Session, guest_id: uuid.UUID) -> bool:
        return session.get(GuestUser, guest_id) is not None

    def ensure_guest(self, session: Session, guest_id: uuid.UUID) -> None:
        """Register a client-supplied guest id the first time we see it."""
        if not self.guest_exists(session, guest_id):
            session.add(GuestUser(id=guest_id))
            session.flush()

    def record_guest_email(
        self,
        session: Session,
        guest_id: uuid.UUID,
        email: str,
    ) -> None:
        """Contact email given at guest checkout; flushed with the order."""
        guest = session.get(GuestUser, guest_id)
        if guest is None:
            guest = GuestUser(id=guest_id)
        guest.email = email
        session.add(guest)
        session.flush()

    # ---- Carts ----

    def get_for_owner(self, session: Session, owner: Owner) -> Cart | None:
        stmt = select(Cart).where(owner_filter(Cart, owner))
        return session.exec(stmt).first()

    def get_or_create(self, session: Session, owner: Owner) -> Cart:
        cart = self.get_for_owner(session, owner)
        if cart is None:
            cart = Cart(**owner_columns(owner))
            session.add(cart)
            session.flush()
        return cart

    # ---- Items ----

    def list_items(self, session: Session, cart_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.cart_id == cart_id)
            .order_by(CartItem.created_at.asc())
        )
        return session.exec(stmt).all()

    def get_item(self, session: Session, item_id: uuid.UUID) -> CartItem | None:
        return session.get(CartItem, item_id)

    def find_item(
        self,
        session: Session,
        cart_id: uuid.UUID,
        variant_id: uuid.UUID,
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.cart_id == cart_id, CartItem.variant_id == variant_id
        )
        return session.exec(stmt).first()

    def save_item(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.flush()
        session.refresh(item)
        return item

    def delete_item(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.flush()

    def clear_items(self, session: Session, cart_id: uuid.UUID) -> int:
        stmt = (
            delete(CartItem)
            .where(CartItem.cart_id == cart_id)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount
