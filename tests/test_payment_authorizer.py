"""
Simulated bank authorizer and its test-only expected-CVC lookup.
"""

from decimal import Decimal

import pytest

from conftest import OTHER_TEST_CARD, VISA_TEST_CARD
from storefront.core.config import get_settings
from storefront.core.errors import CardDeclined
from storefront.services.payment_authorizer import (
    SimulatedBankAuthorizer,
    get_payment_authorizer,
)


def test_expected_cvc_is_deterministic():
    bank = SimulatedBankAuthorizer()
    assert bank.expected_cvc(VISA_TEST_CARD) == bank.expected_cvc(VISA_TEST_CARD)
    assert len(bank.expected_cvc(VISA_TEST_CARD)) == 3


def test_expected_cvc_locked_without_flag(monkeypatch):
    monkeypatch.setattr(get_settings(), "ENABLE_TEST_UTILITIES", False)
    with pytest.raises(RuntimeError):
        SimulatedBankAuthorizer().expected_cvc(VISA_TEST_CARD)


def test_authorize_accepts_expected_cvc():
    bank = SimulatedBankAuthorizer()
    cvc = bank.expected_cvc(OTHER_TEST_CARD)
    auth = bank.authorize(OTHER_TEST_CARD, "12/2099", cvc, Decimal("5.00"))
    assert auth.last4 == "4242"


@pytest.mark.parametrize("prefix", ["0", "1", "2", "9"])
def test_one_cvc_per_card(prefix):
    bank = SimulatedBankAuthorizer()
    longer = prefix + bank.expected_cvc(OTHER_TEST_CARD)
    with pytest.raises(CardDeclined):
        bank.authorize(OTHER_TEST_CARD, "12/2099", longer, Decimal("5.00"))


def test_authorize_declines_wrong_cvc():
    bank = SimulatedBankAuthorizer()
    good = bank.expected_cvc(OTHER_TEST_CARD)
    bad = str((int(good) + 1) % 1000).zfill(3)
    with pytest.raises(CardDeclined):
        bank.authorize(OTHER_TEST_CARD, "12/2099", bad, Decimal("5.00"))


def test_transaction_ids_are_unique():
    bank = SimulatedBankAuthorizer()
    ids = {bank.authorize_tokenized("1111", Decimal("1.00")).transaction_id for _ in range(20)}
    assert len(ids) == 20


def test_dependency_builds_configured_authorizer():
    assert isinstance(get_payment_authorizer(), SimulatedBankAuthorizer)


def test_dependency_rejects_unknown_authorizer(monkeypatch):
    monkeypatch.setattr(get_settings(), "PAYMENT_AUTHORIZER", "acme")
    with pytest.raises(RuntimeError):
        get_payment_authorizer()
