# storefront/routers/payment_cards.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_user
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.payment_card_repo import PaymentCardRepository
from storefront.schemas.payment_card import CardDetails, PaymentCardRead, PaymentCardSaved
from storefront.services.card_vault import CardVault

router = APIRouter(prefix="/payment-cards", tags=["Payment cards"])

vault = CardVault(PaymentCardRepository())


@router.get("", response_model=PaymentCardRead)
def get_saved_card(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Masked saved card (or has_saved_card=false).
    """
    return vault.get_masked(session, current_user.id)


@router.post("", response_model=PaymentCardSaved)
def save_card(
    payload: CardDetails,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Save (or replace) the user's debit card.
    """
    card = vault.tokenize_and_store(
        session,
        current_user.id,
        payload.card_number,
        payload.expiry,
        payload.cvc,
        payload.card_type,
    )
    session.commit()
    return PaymentCardSaved(message="Payment card saved successfully", card=card)


@router.delete("")
def delete_saved_card(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_user),
):
    """
    Remove the user's saved card.
    """
    vault.delete(session, current_user.id)
    session.commit()
    return {"message": "Payment card deleted successfully"}
