"""
Card vault: tokenization, saved-card verification, one-time authorization.
"""

import logging
from decimal import Decimal

import pytest
from sqlmodel import select

from conftest import FUTURE_EXPIRY, OTHER_TEST_CARD, PAST_EXPIRY, VISA_TEST_CARD, expected_cvc
from storefront.core.errors import (
    CardDeclined,
    CardExpired,
    CardNotFound,
    CardTypeNotSupported,
    CardValidationError,
    CardVerificationFailed,
    InvalidCVC,
)
from storefront.models.payment_card import PaymentCard
from storefront.repositories.payment_card_repo import PaymentCardRepository
from storefront.services.card_vault import CardVault
from storefront.services.payment_authorizer import SimulatedBankAuthorizer


@pytest.fixture
def vault():
    return CardVault(PaymentCardRepository())


@pytest.fixture
def saved_card(session, vault, user):
    vault.tokenize_and_store(session, user.id, VISA_TEST_CARD, FUTURE_EXPIRY, "123", "DEBIT")
    session.commit()


class TestTokenizeAndStore:
    def test_returns_masked_card(self, session, vault, user):
        card = vault.tokenize_and_store(
            session, user.id, VISA_TEST_CARD, FUTURE_EXPIRY, "123", "debit"
        )
        assert card.has_saved_card
        assert card.masked_number == "**** **** **** 1111"
        assert card.card_type == "DEBIT"
        assert VISA_TEST_CARD not in card.model_dump_json()

    def test_stores_ciphertext_only(self, session, vault, user):
        vault.tokenize_and_store(session, user.id, VISA_TEST_CARD, FUTURE_EXPIRY, "123", "DEBIT")
        session.commit()
        row = PaymentCardRepository().get_for_user(session, user.id)
        stored = [
            row.segment1_encrypted,
            row.segment2_encrypted,
            row.segment3_encrypted,
            row.segment4_encrypted,
            row.expiry_encrypted,
        ]
        assert all(s not in ("4111", "1111", FUTURE_EXPIRY) for s in stored)
        assert row.cvc_hash and row.cvc_hash != "123"
        assert row.cvc_salt.startswith("$2b$")
        assert row.cvc_hash.startswith(row.cvc_salt)
        assert row.last4_plain == "1111"

    def test_second_card_replaces_first(self, session, vault, user, saved_card):
        vault.tokenize_and_store(session, user.id, OTHER_TEST_CARD, FUTURE_EXPIRY, "456", "DEBIT")
        session.commit()
        assert vault.get_masked(session, user.id).last4 == "4242"
        assert len(session.exec(select(PaymentCard)).all()) == 1

    def test_credit_rejected_before_validation(self, session, vault, user):
        # Card number is invalid too, but the type check comes first.
        with pytest.raises(CardTypeNotSupported) as exc_info:
            vault.tokenize_and_store(session, user.id, "1234", "bad", "x", "CREDIT")
        assert exc_info.value.detail == "Only debit payment is supported!"

    def test_bad_luhn(self, session, vault, user):
        with pytest.raises(CardValidationError):
            vault.tokenize_and_store(
                session, user.id, "4111111111111112", FUTURE_EXPIRY, "123", "DEBIT"
            )

    def test_expired(self, session, vault, user):
        with pytest.raises(CardExpired):
            vault.tokenize_and_store(session, user.id, VISA_TEST_CARD, PAST_EXPIRY, "123", "DEBIT")

    def test_bad_cvc(self, session, vault, user):
        with pytest.raises(CardValidationError):
            vault.tokenize_and_store(session, user.id, VISA_TEST_CARD, FUTURE_EXPIRY, "12", "DEBIT")

    def test_card_number_never_logged(self, session, vault, user, caplog):
        caplog.set_level(logging.DEBUG)
        vault.tokenize_and_store(session, user.id, VISA_TEST_CARD, FUTURE_EXPIRY, "987", "DEBIT")
        assert VISA_TEST_CARD not in caplog.text


class TestVerifySavedCard:
    def test_correct_cvc(self, session, vault, user, saved_card):
        verified = vault.verify_saved_card(session, user.id, "123")
        assert verified.card_number == VISA_TEST_CARD
        assert verified.expiry == FUTURE_EXPIRY
        assert verified.last4 == "1111"
        assert VISA_TEST_CARD not in repr(verified)

    def test_wrong_cvc(self, session, vault, user, saved_card):
        with pytest.raises(InvalidCVC) as exc_info:
            vault.verify_saved_card(session, user.id, "124")
        assert "123" not in str(exc_info.value.detail)

    def test_no_card(self, session, vault, user):
        with pytest.raises(CardNotFound):
            vault.verify_saved_card(session, user.id, "123")

    def test_legacy_record_without_hash(self, session, vault, user, saved_card):
        row = PaymentCardRepository().get_for_user(session, user.id)
        row.cvc_hash = None
        row.cvc_salt = None
        session.add(row)
        session.commit()
        with pytest.raises(CardVerificationFailed):
            vault.verify_saved_card(session, user.id, "123")

    def test_saved_card_that_has_since_expired(self, session, vault, user, saved_card):
        from storefront.core import card_crypto

        row = PaymentCardRepository().get_for_user(session, user.id)
        row.expiry_encrypted = card_crypto.encrypt_value(PAST_EXPIRY)
        session.add(row)
        session.commit()
        with pytest.raises(CardExpired):
            vault.verify_saved_card(session, user.id, "123")


class TestAuthorizeOneTime:
    def test_approved_with_expected_cvc(self, vault):
        auth = vault.authorize_one_time(
            OTHER_TEST_CARD,
            FUTURE_EXPIRY,
            expected_cvc(OTHER_TEST_CARD),
            "DEBIT",
            Decimal("117.95"),
            SimulatedBankAuthorizer(),
        )
        assert auth.last4 == "4242"
        assert auth.transaction_id.startswith("TXN-")

    def test_declined_with_other_cvc(self, vault):
        good = expected_cvc(OTHER_TEST_CARD)
        bad = "000" if good != "000" else "111"
        with pytest.raises(CardDeclined):
            vault.authorize_one_time(
                OTHER_TEST_CARD, FUTURE_EXPIRY, bad, "DEBIT", Decimal("10"), SimulatedBankAuthorizer()
            )

    def test_type_checked_first(self, vault):
        with pytest.raises(CardTypeNotSupported):
            vault.authorize_one_time(
                "nope", "nope", "nope", "CREDIT", Decimal("10"), SimulatedBankAuthorizer()
            )

    def test_bad_expiry_format(self, vault):
        with pytest.raises(CardValidationError):
            vault.authorize_one_time(
                OTHER_TEST_CARD, "12/99", "123", "DEBIT", Decimal("10"), SimulatedBankAuthorizer()
            )


class TestManageSavedCard:
    def test_masked_when_absent(self, session, vault, user):
        assert vault.get_masked(session, user.id).has_saved_card is False

    def test_delete(self, session, vault, user, saved_card):
        vault.delete(session, user.id)
        session.commit()
        assert vault.get_masked(session, user.id).has_saved_card is False

    def test_delete_missing(self, session, vault, user):
        with pytest.raises(CardNotFound):
            vault.delete(session, user.id)
