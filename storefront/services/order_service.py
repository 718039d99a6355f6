# storefront/services/order_service.py
import logging
import uuid

from sqlmodel import Session

from storefront.core.errors import OrderNotFound
from storefront.core.owner import Owner, owner_of
from storefront.models.cart import CartItem
from storefront.models.order import Order
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.schemas.order import (
    AdminOrderDetail,
    AdminOrderRow,
    CustomerInfo,
    OrderSummary,
    ReorderResult,
)
from storefront.services.inventory_ledger import InventoryLedger
from storefront.services.order_summary import OrderSummaryBuilder

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for placed orders.

    Responsibilities:
      - order history for the caller (newest first)
      - single order details, only for its owner
      - reorder: put a past order's variants back into the cart
      - admin views over every order (read-only)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        ledger: InventoryLedger,
        summary_builder: OrderSummaryBuilder,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.ledger = ledger
        self.summary_builder = summary_builder

    def list_orders(
        self,
        session: Session,
        owner: Owner,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderSummary]:
        orders = self.order_repo.list_for_owner(session, owner, skip, limit)
        return [self.summary_builder.build(session, o) for o in orders]

    def get_order(
        self,
        session: Session,
        owner: Owner,
        order_id: uuid.UUID,
    ) -> OrderSummary:
        """
        - 404 if order not found or does not belong to this owner.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if order is None or owner_of(order) != owner:
            raise OrderNotFound()
        return self.summary_builder.build(session, order)

    def reorder(
        self,
        session: Session,
        owner: Owner,
        order_id: uuid.UUID,
    ) -> ReorderResult:
        """
        Copy an order's lines into the cart.

        Lines whose variant no longer has the ordered quantity in stock
        are skipped and reported in out_of_stock. Quantities already in
        the cart are topped up, not replaced.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if order is None or owner_of(order) != owner:
            raise OrderNotFound()

        cart = self.cart_repo.get_or_create(session, owner)
        added: list[uuid.UUID] = []
        out_of_stock: list[uuid.UUID] = []

        for line in self.order_repo.list_items_for_order(session, order.id):
            existing = self.cart_repo.find_item(session, cart.id, line.variant_id)
            wanted = line.quantity + (existing.quantity if existing else 0)
            if self.ledger.check_available(session, line.variant_id) < wanted:
                out_of_stock.append(line.variant_id)
                continue

            if existing:
                existing.quantity = wanted
                self.cart_repo.save_item(session, existing)
            else:
                self.cart_repo.save_item(
                    session,
                    CartItem(
                        cart_id=cart.id,
                        product_id=line.product_id,
                        variant_id=line.variant_id,
                        quantity=line.quantity,
                    ),
                )
            added.append(line.variant_id)

        session.commit()
        logger.info(
            "Reorder of %s: %s added, %s out of stock",
            order.order_number,
            len(added),
            len(out_of_stock),
        )

        if out_of_stock:
            message = "Some items were out of stock and could not be added to the cart"
        else:
            message = "Items added to cart"
        return ReorderResult(message=message, added=added, out_of_stock=out_of_stock)

    # -------- Admin --------

    def _customer(
        self,
        session: Session,
        order: Order,
        summary: OrderSummary,
    ) -> CustomerInfo:
        shipping = summary.shipping_address
        customer = self.order_repo.get_customer(session, order)
        if isinstance(customer, User):
            return CustomerInfo(
                customer_type="REGISTERED",
                name=customer.name,
                email=customer.email,
                phone=shipping.phone if shipping else None,
            )
        return CustomerInfo(
            customer_type="GUEST",
            name=shipping.full_name if shipping else "Guest Customer",
            email=customer.email if customer else None,
            phone=shipping.phone if shipping else None,
        )

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[AdminOrderRow]:
        rows: list[AdminOrderRow] = []
        for order in self.order_repo.list_all(session, skip, limit):
            summary = self.summary_builder.build(session, order)
            shipping = summary.shipping_address
            location = None
            if shipping is not None and (shipping.city or shipping.state):
                location = ", ".join(p for p in (shipping.city, shipping.state) if p)
            rows.append(
                AdminOrderRow(
                    order_id=summary.order_id,
                    order_number=summary.order_number,
                    status=summary.status,
                    order_date=summary.order_date,
                    customer=self._customer(session, order, summary),
                    total_amount=summary.price_breakdown.total,
                    item_count=summary.item_count,
                    shipping_location=location,
                )
            )
        return rows

    def get_any_order(self, session: Session, order_id: uuid.UUID) -> AdminOrderDetail:
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise OrderNotFound()
        summary = self.summary_builder.build(session, order)
        return AdminOrderDetail(
            **summary.model_dump(),
            customer=self._customer(session, order, summary),
        )
