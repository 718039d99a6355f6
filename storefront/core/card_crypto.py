# storefront/core/card_crypto.py
"""
Card primitives used by the card vault.

- Card number / expiry format checks (Luhn, MM/YYYY)
- Segment encryption with Fernet (AES-128-CBC + HMAC-SHA256, random IV
  per call, so identical segments never produce identical ciphertexts)
- Salted one-way CVC hash (bcrypt)

Nothing here logs. Callers must never log inputs or outputs either.
"""
import re
from datetime import date
from functools import lru_cache

import bcrypt
from cryptography.fernet import Fernet, InvalidToken

from storefront.core.config import get_settings

CARD_NUMBER_LENGTH = 16
SEGMENT_LENGTH = 4
EXPIRY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])/(\d{4})$")
CVC_PATTERN = re.compile(r"^\d{3,4}$")


class CardCryptoError(Exception):
    """Stored ciphertext could not be decrypted with the configured key."""


@lru_cache
def get_fernet() -> Fernet:
    """
    Fernet built from CARD_ENCRYPTION_KEY.

    Raises ValueError on a malformed key; main.py calls this at startup
    so a bad key stops the app instead of failing the first checkout.
    """
    return Fernet(get_settings().CARD_ENCRYPTION_KEY.encode())


# -------- Format checks --------


def normalize_card_number(card_number: str) -> str:
    return re.sub(r"\s+", "", card_number or "")


def luhn_valid(card_number: str) -> bool:
    """
    Luhn checksum over exactly 16 digits (whitespace ignored).
    """
    digits = normalize_card_number(card_number)
    if len(digits) != CARD_NUMBER_LENGTH or not digits.isdigit():
        return False

    total = 0
    for i, ch in enumerate(reversed(digits)):
        n = int(ch)
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


def parse_expiry(expiry: str) -> tuple[int, int] | None:
    """Return (month, year) for a well-formed MM/YYYY string, else None."""
    match = EXPIRY_PATTERN.match((expiry or "").strip())
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def is_expired(month: int, year: int, today: date | None = None) -> bool:
    """A card is valid through the last day of its expiry month."""
    today = today or date.today()
    return year < today.year or (year == today.year and month < today.month)


def cvc_well_formed(cvc: str) -> bool:
    return bool(CVC_PATTERN.match(cvc or ""))


# -------- Segments / masking --------


def split_card_number(card_number: str) -> list[str]:
    digits = normalize_card_number(card_number)
    return [
        digits[i : i + SEGMENT_LENGTH]
        for i in range(0, CARD_NUMBER_LENGTH, SEGMENT_LENGTH)
    ]


def mask_last4(last4: str) -> str:
    return f"**** **** **** {last4}"


# -------- Encryption --------


def encrypt_value(value: str) -> str:
    return get_fernet().encrypt(value.encode()).decode()


def decrypt_value(token: str) -> str:
    try:
        return get_fernet().decrypt(token.encode()).decode()
    except InvalidToken as exc:
        raise CardCryptoError("stored card data could not be decrypted") from exc


def encrypt_segments(card_number: str) -> list[str]:
    """Encrypt each 4-digit segment independently."""
    return [encrypt_value(seg) for seg in split_card_number(card_number)]


def decrypt_segments(segments: list[str]) -> str:
    return "".join(decrypt_value(seg) for seg in segments)


# -------- CVC hashing --------


def new_salt(rounds: int | None = None) -> str:
    """bcrypt salt string with the configured cost factor."""
    rounds = rounds or get_settings().CVC_HASH_ROUNDS
    return bcrypt.gensalt(rounds=rounds).decode("utf-8")


def hash_cvc(cvc: str, salt: str) -> str:
    return bcrypt.hashpw(cvc.encode("utf-8"), salt.encode("utf-8")).decode("utf-8")


def verify_cvc(cvc: str, expected_hash: str) -> bool:
    """bcrypt.checkpw reads the salt back out of the stored hash."""
    try:
        return bcrypt.checkpw(cvc.encode("utf-8"), expected_hash.encode("utf-8"))
    except ValueError:
        return False
