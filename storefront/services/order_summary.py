# storefront/services/order_summary.py
from datetime import timedelta

from sqlmodel import Session

from storefront.models.address import Address
from storefront.models.order import Order
from storefront.repositories.address_repo import AddressRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import (
    AddressRead,
    OrderSummary,
    OrderSummaryItem,
    PaymentReceipt,
    PriceBreakdown,
)
from storefront.services.pricing import round_money

DELIVERY_DAYS = 7


class OrderSummaryBuilder:
    """
    Read model of a persisted order.

    Joins items (product name, color, size, main image), payment and
    both addresses. Billing falls back to shipping when absent.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        address_repo: AddressRepository,
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.address_repo = address_repo

    @staticmethod
    def _address(address: Address | None) -> AddressRead | None:
        if address is None:
            return None
        return AddressRead.model_validate(address, from_attributes=True)

    def build(self, session: Session, order: Order) -> OrderSummary:
        items = self.order_repo.list_items_for_order(session, order.id)
        products = self.product_repo.get_many(
            session, list({it.product_id for it in items})
        )

        item_dtos: list[OrderSummaryItem] = []
        for it in items:
            product = products.get(it.product_id)
            variant = self.product_repo.get_variant(session, it.variant_id)
            color, size = (None, None)
            image_url = None
            if variant is not None:
                color, size = self.product_repo.variant_labels(session, variant)
                image_url = self.product_repo.main_image_url(
                    session, it.product_id, variant.color_id
                )
            item_dtos.append(
                OrderSummaryItem(
                    product_id=it.product_id,
                    variant_id=it.variant_id,
                    name=product.name if product else None,
                    color=color,
                    size=size,
                    image_url=image_url,
                    price=round_money(it.price),
                    quantity=it.quantity,
                    subtotal=round_money(it.price * it.quantity),
                )
            )

        payment = self.order_repo.get_payment(session, order.id)
        if payment is not None:
            receipt = PaymentReceipt(
                method=order.payment_method,
                card_type=payment.card_type,
                card_last4=payment.card_last4,
                transaction_id=payment.transaction_id,
                amount=round_money(payment.amount),
                message=f"Payment made from card ending in {payment.card_last4}",
            )
        else:
            receipt = PaymentReceipt(method=order.payment_method)

        shipping = self.address_repo.get_by_id(session, order.shipping_address_id)
        billing = self.address_repo.get_by_id(session, order.billing_address_id)

        return OrderSummary(
            order_id=order.id,
            order_number=order.order_number,
            status=order.status,
            order_date=order.created_at,
            estimated_delivery=order.created_at.date() + timedelta(days=DELIVERY_DAYS),
            estimated_delivery_message=f"Your order will arrive in {DELIVERY_DAYS} days",
            items=item_dtos,
            item_count=sum(it.quantity for it in items),
            price_breakdown=PriceBreakdown(
                subtotal=round_money(order.subtotal),
                tax=round_money(order.tax),
                shipping=round_money(order.shipping_fee),
                total=round_money(order.total_amount),
            ),
            payment=receipt,
            shipping_address=self._address(shipping),
            billing_address=self._address(billing or shipping),
        )
