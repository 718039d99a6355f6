# storefront/services/payment_authorizer.py
"""
Payment authorization boundary.

Only a simulated bank exists. It derives an "expected" CVC from the card
number (one 3-digit value per card) and declines any other value,
which gives deterministic approve / decline behavior without a real
processor.
"""
import hashlib
import logging
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from storefront.core.card_crypto import normalize_card_number
from storefront.core.config import get_settings
from storefront.core.errors import CardDeclined

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authorization:
    transaction_id: str
    last4: str


def new_transaction_id() -> str:
    """TXN-<epoch ms>-<random>"""
    return f"TXN-{int(time.time() * 1000)}-{secrets.token_hex(4).upper()}"


class PaymentAuthorizer(ABC):
    @abstractmethod
    def authorize(
        self,
        card_number: str,
        expiry: str,
        cvc: str,
        amount: Decimal,
    ) -> Authorization:
        """Charge a card presented in full. Raises CardDeclined."""

    @abstractmethod
    def authorize_tokenized(self, last4: str, amount: Decimal) -> Authorization:
        """Charge a saved card whose CVC the vault already verified."""


class SimulatedBankAuthorizer(PaymentAuthorizer):
    CVC_LENGTH = 3

    def _derive_cvc(self, card_number: str) -> str:
        digest = hashlib.sha256(normalize_card_number(card_number).encode()).hexdigest()
        return str(int(digest, 16) % 10**self.CVC_LENGTH).zfill(self.CVC_LENGTH)

    def authorize(self, card_number, expiry, cvc, amount):
        last4 = normalize_card_number(card_number)[-4:]
        if cvc != self._derive_cvc(card_number):
            logger.info("Simulated bank declined card ending %s", last4)
            raise CardDeclined()

        txn = new_transaction_id()
        logger.info("Simulated bank approved %s on card ending %s", amount, last4)
        return Authorization(transaction_id=txn, last4=last4)

    def authorize_tokenized(self, last4, amount):
        return Authorization(transaction_id=new_transaction_id(), last4=last4)

    def expected_cvc(self, card_number: str) -> str:
        """
        CVC this bank accepts for `card_number`.

        Only available with ENABLE_TEST_UTILITIES; no route exposes it.
        """
        if not get_settings().ENABLE_TEST_UTILITIES:
            raise RuntimeError("expected_cvc requires ENABLE_TEST_UTILITIES")
        return self._derive_cvc(card_number)


_AUTHORIZERS: dict[str, type[PaymentAuthorizer]] = {
    "simulated": SimulatedBankAuthorizer,
}


def get_payment_authorizer() -> PaymentAuthorizer:
    """FastAPI dependency; tests override it through app.dependency_overrides."""
    name = get_settings().PAYMENT_AUTHORIZER
    try:
        return _AUTHORIZERS[name]()
    except KeyError:
        raise RuntimeError(f"Unknown PAYMENT_AUTHORIZER: {name}")
