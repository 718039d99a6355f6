# storefront/repositories/payment_card_repo.py
import uuid

from sqlmodel import Session, select

from storefront.models.payment_card import PaymentCard


class PaymentCardRepository:
    """
    Data access for saved cards.

    NOTE:
      - No commits here; saving a card during new-card checkout must
        roll back with the order.
    """

    def get_for_user(self, session: Session, user_id: uuid.UUID) -> PaymentCard | None:
        stmt = select(PaymentCard).where(PaymentCard.user_id == user_id)
        return session.exec(stmt).first()

    def save(self, session: Session, card: PaymentCard) -> PaymentCard:
        session.add(card)
        session.flush()
        session.refresh(card)
        return card

    def delete(self, session: Session, card: PaymentCard) -> None:
        session.delete(card)
        session.flush()
