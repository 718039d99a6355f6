# storefront/services/cart_service.py
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.core.errors import CartItemNotFound, VariantNotFound
from storefront.core.owner import GuestOwner, Owner
from storefront.models.cart import CartItem
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemRead,
    CartSummary,
)
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.pricing import compute_totals, effective_price, round_money


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - lazily create the owner's cart
      - resolve product + color + size to a variant
      - enforce quantity <= available stock
      - price every line from the live product through the pricing engine
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        ledger: InventoryLedger,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.ledger = ledger

    # ---- internal helpers ----

    def _check_stock(self, session: Session, variant_id: uuid.UUID, quantity: int) -> None:
        available = self.ledger.check_available(session, variant_id)
        if quantity > available:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only {available} items available in stock",
            )

    def _owned_item(self, session: Session, owner: Owner, item_id: uuid.UUID) -> CartItem:
        cart = self.cart_repo.get_for_owner(session, owner)
        item = self.cart_repo.get_item(session, item_id)
        if cart is None or item is None or item.cart_id != cart.id:
            raise CartItemNotFound()
        return item

    # ---- public operations ----

    def get_cart_summary(self, session: Session, owner: Owner) -> CartSummary:
        """
        Return full cart summary with live prices and order-style totals
        (same tax and shipping as checkout).
        """
        cart = self.cart_repo.get_for_owner(session, owner)
        items = self.cart_repo.list_items(session, cart.id) if cart else []
        products = self.product_repo.get_many(
            session, list({it.product_id for it in items})
        )

        item_reads: list[CartItemRead] = []
        lines = []
        for it in items:
            product = products.get(it.product_id)
            variant = self.product_repo.get_variant(session, it.variant_id)
            if product is None or variant is None:
                continue
            unit_price = effective_price(product)
            color, size = self.product_repo.variant_labels(session, variant)
            lines.append((unit_price, it.quantity))
            item_reads.append(
                CartItemRead(
                    id=it.id,
                    product_id=it.product_id,
                    variant_id=it.variant_id,
                    name=product.name,
                    color=color,
                    size=size,
                    image_url=self.product_repo.main_image_url(
                        session, product.id, variant.color_id
                    ),
                    unit_price=round_money(unit_price),
                    quantity=it.quantity,
                    available_stock=variant.quantity,
                    line_total=round_money(unit_price * it.quantity),
                )
            )

        totals = compute_totals(lines)
        return CartSummary(
            guest_id=owner.id if isinstance(owner, GuestOwner) else None,
            items=item_reads,
            total_quantity=sum(r.quantity for r in item_reads),
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            total=totals.total,
        )

    def add_to_cart(
        self,
        session: Session,
        owner: Owner,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a variant to the owner's cart.

        Rules:
          - the (product, color, size) combination must exist
          - quantity + existing quantity <= available stock
        """
        variant = self.product_repo.find_variant(
            session, payload.product_id, payload.color, payload.size
        )
        if variant is None:
            raise VariantNotFound(
                f"No inventory found for {payload.color}, size {payload.size}"
            )

        cart = self.cart_repo.get_or_create(session, owner)
        existing = self.cart_repo.find_item(session, cart.id, variant.id)

        if existing:
            new_qty = existing.quantity + payload.quantity
            self._check_stock(session, variant.id, new_qty)
            existing.quantity = new_qty
            self.cart_repo.save_item(session, existing)
        else:
            self._check_stock(session, variant.id, payload.quantity)
            self.cart_repo.save_item(
                session,
                CartItem(
                    cart_id=cart.id,
                    product_id=payload.product_id,
                    variant_id=variant.id,
                    quantity=payload.quantity,
                ),
            )

        session.commit()
        return self.get_cart_summary(session, owner)

    def update_quantity(
        self,
        session: Session,
        owner: Owner,
        item_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Update the quantity of an item in the cart.

        If quantity exceeds available stock => 400.
        """
        item = self._owned_item(session, owner, item_id)
        self._check_stock(session, item.variant_id, payload.quantity)

        item.quantity = payload.quantity
        self.cart_repo.save_item(session, item)
        session.commit()

        return self.get_cart_summary(session, owner)

    def remove_item(
        self,
        session: Session,
        owner: Owner,
        item_id: uuid.UUID,
    ) -> CartSummary:
        """
        Remove an item from the cart and return updated summary.
        """
        item = self._owned_item(session, owner, item_id)
        self.cart_repo.delete_item(session, item)
        session.commit()
        return self.get_cart_summary(session, owner)
