# storefront/services/card_vault.py
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import Session

from storefront.core import card_crypto
from storefront.core.errors import (
    CardExpired,
    CardNotFound,
    CardTypeNotSupported,
    CardValidationError,
    CardVerificationFailed,
    InvalidCVC,
)
from storefront.models.payment_card import PaymentCard
from storefront.repositories.payment_card_repo import PaymentCardRepository
from storefront.schemas.payment_card import PaymentCardRead
from storefront.services.payment_authorizer import Authorization, PaymentAuthorizer

logger = logging.getLogger(__name__)

SUPPORTED_CARD_TYPE = "DEBIT"


@dataclass(frozen=True)
class VerifiedCard:
    """Decrypted saved card; lives only for the duration of one checkout."""

    card_number: str = field(repr=False)
    expiry: str = field(repr=False)
    last4: str


class CardVault:
    """
    Tokenization and verification of payment cards.

    Responsibilities:
      - validate card number (Luhn), expiry (MM/YYYY, not past), CVC
      - store a user's card as encrypted segments + salted CVC hash
      - verify a saved card against a re-entered CVC
      - authorize one-time cards through the PaymentAuthorizer

    Card numbers and CVCs are never logged or returned; only last4.
    Nothing here commits.
    """

    def __init__(self, card_repo: PaymentCardRepository):
        self.card_repo = card_repo

    # -------- validation helpers --------

    @staticmethod
    def _check_card_type(card_type: str) -> str:
        normalized = (card_type or "").strip().upper()
        if normalized != SUPPORTED_CARD_TYPE:
            raise CardTypeNotSupported()
        return normalized

    @staticmethod
    def _check_card(card_number: str, expiry: str) -> tuple[str, str]:
        number = card_crypto.normalize_card_number(card_number)
        if not card_crypto.luhn_valid(number):
            raise CardValidationError("Invalid card number")

        parsed = card_crypto.parse_expiry(expiry)
        if parsed is None:
            raise CardValidationError("Invalid expiry date format, use MM/YYYY")
        if card_crypto.is_expired(*parsed):
            raise CardExpired()

        return number, expiry.strip()

    @staticmethod
    def _check_cvc(cvc: str) -> str:
        if not card_crypto.cvc_well_formed(cvc):
            raise CardValidationError("Invalid CVC")
        return cvc

    @staticmethod
    def _to_read(card: PaymentCard | None) -> PaymentCardRead:
        if card is None:
            return PaymentCardRead(has_saved_card=False)
        return PaymentCardRead(
            has_saved_card=True,
            masked_number=card_crypto.mask_last4(card.last4_plain),
            last4=card.last4_plain,
            card_type=card.card_type,
            saved_at=card.updated_at,
        )

    # -------- operations --------

    def tokenize_and_store(
        self,
        session: Session,
        user_id: uuid.UUID,
        card_number: str,
        expiry: str,
        cvc: str,
        card_type: str,
    ) -> PaymentCardRead:
        """
        Validate and save the user's card, replacing any previous one.

        Steps:
          1. DEBIT only (checked before any crypto work).
          2. Luhn, expiry, CVC format.
          3. Encrypt the 4 segments and expiry independently.
          4. Hash the CVC with a fresh salt.
          5. Upsert the single row for this user (flush, no commit).
        """
        card_type = self._check_card_type(card_type)
        number, expiry = self._check_card(card_number, expiry)
        cvc = self._check_cvc(cvc)

        segments = card_crypto.encrypt_segments(number)
        salt = card_crypto.new_salt()

        card = self.card_repo.get_for_user(session, user_id)
        if card is None:
            card = PaymentCard(
                user_id=user_id,
                segment1_encrypted=segments[0],
                segment2_encrypted=segments[1],
                segment3_encrypted=segments[2],
                segment4_encrypted=segments[3],
                expiry_encrypted=card_crypto.encrypt_value(expiry),
                last4_plain=number[-4:],
                card_type=card_type,
            )
        else:
            card.segment1_encrypted = segments[0]
            card.segment2_encrypted = segments[1]
            card.segment3_encrypted = segments[2]
            card.segment4_encrypted = segments[3]
            card.expiry_encrypted = card_crypto.encrypt_value(expiry)
            card.last4_plain = number[-4:]
            card.card_type = card_type
            card.updated_at = datetime.now(timezone.utc)

        card.cvc_salt = salt
        card.cvc_hash = card_crypto.hash_cvc(cvc, salt)
        card = self.card_repo.save(session, card)

        logger.info("Stored card ending %s for user %s", card.last4_plain, user_id)
        return self._to_read(card)

    def verify_saved_card(
        self,
        session: Session,
        user_id: uuid.UUID,
        cvc: str,
    ) -> VerifiedCard:
        """
        Check a re-entered CVC against the saved card.

        The card is only decrypted after the CVC hash matches.

        Raises:
            CardNotFound: user has no saved card.
            CardVerificationFailed: record lacks a CVC hash, or stored
                data no longer decrypts / passes Luhn.
            InvalidCVC: CVC does not match.
            CardExpired: saved card is past its expiry month.
        """
        card = self.card_repo.get_for_user(session, user_id)
        if card is None:
            raise CardNotFound()

        if not card.cvc_hash or not card.cvc_salt:
            logger.warning("Saved card for user %s has no CVC hash", user_id)
            raise CardVerificationFailed()

        if not card_crypto.cvc_well_formed(cvc) or not card_crypto.verify_cvc(
            cvc, card.cvc_hash
        ):
            logger.info("CVC mismatch for card ending %s", card.last4_plain)
            raise InvalidCVC()

        try:
            number = card_crypto.decrypt_segments(
                [
                    card.segment1_encrypted,
                    card.segment2_encrypted,
                    card.segment3_encrypted,
                    card.segment4_encrypted,
                ]
            )
            expiry = card_crypto.decrypt_value(card.expiry_encrypted)
        except card_crypto.CardCryptoError:
            logger.error("Saved card for user %s could not be decrypted", user_id)
            raise CardVerificationFailed()

        parsed = card_crypto.parse_expiry(expiry)
        if parsed is None:
            raise CardVerificationFailed()
        if card_crypto.is_expired(*parsed):
            raise CardExpired()
        if not card_crypto.luhn_valid(number):
            raise CardVerificationFailed()

        return VerifiedCard(card_number=number, expiry=expiry, last4=number[-4:])

    def authorize_one_time(
        self,
        card_number: str,
        expiry: str,
        cvc: str,
        card_type: str,
        amount: Decimal,
        authorizer: PaymentAuthorizer,
    ) -> Authorization:
        """Validate a card typed at checkout and charge it once."""
        self._check_card_type(card_type)
        number, expiry = self._check_card(card_number, expiry)
        cvc = self._check_cvc(cvc)
        return authorizer.authorize(number, expiry, cvc, amount)

    def get_masked(self, session: Session, user_id: uuid.UUID) -> PaymentCardRead:
        return self._to_read(self.card_repo.get_for_user(session, user_id))

    def delete(self, session: Session, user_id: uuid.UUID) -> None:
        card = self.card_repo.get_for_user(session, user_id)
        if card is None:
            raise CardNotFound()
        self.card_repo.delete(session, card)
        logger.info("Deleted saved card for user %s", user_id)
