# storefront/core/errors.py
"""
Domain errors raised by services.

Every error is an HTTPException so routers never translate them;
main.py renders all of them as {"error": <detail>, ...extra}.

None of these messages may carry card numbers, CVCs or expected CVCs.
"""
import uuid
from typing import Any

from fastapi import HTTPException, status


class StorefrontError(HTTPException):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request failed"

    def __init__(self, message: str | None = None, **extra: Any):
        super().__init__(status_code=self.status_code, detail=message or self.message)
        self.extra = extra


# -------- Validation --------


class CardValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid card details"


class CardTypeNotSupported(CardValidationError):
    message = "Only debit payment is supported!"


class GuestIdentityRequired(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Guest ID required"


class EmptyCart(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Cart is empty"


# -------- Payment --------


class InvalidCVC(StorefrontError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    message = "Invalid CVC"


class CardExpired(StorefrontError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    message = "Card has expired"


class CardDeclined(StorefrontError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    message = "Card was declined"


class CardVerificationFailed(StorefrontError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    message = "Saved card could not be verified, please re-enter your card"


# -------- Not found --------


class CardNotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "No saved card found"


class AddressNotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Address not found"


class OrderNotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Order not found"


class CartItemNotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Item not found in cart"


class VariantNotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Product variant not found"


# -------- Stock / consistency --------


class InsufficientStock(StorefrontError):
    """
    Requested quantity exceeds what the variant has on hand.

    `available` is the count observed when the decrement was refused.
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(
        self,
        variant_id: uuid.UUID,
        requested: int,
        available: int,
        message: str | None = None,
    ):
        super().__init__(
            message
            or f"Insufficient stock (have {available}, requested {requested})",
            variant_id=str(variant_id),
            available=available,
        )
        self.variant_id = variant_id
        self.requested = requested
        self.available = available


class OrderNotCompleted(InsufficientStock):
    """Stock vanished between validation and decrement; nothing was persisted."""

    def __init__(self, cause: InsufficientStock):
        super().__init__(
            cause.variant_id,
            cause.requested,
            cause.available,
            message="Order could not be completed, no charge applied",
        )


class StorageUnavailable(StorefrontError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Storage is temporarily unavailable, please try again later"
