# storefront/core/auth.py
"""
Request identity.

Customers and admins arrive with an HS256 bearer token whose `sub` is
their users.id; anonymous shoppers send X-Guest-Id instead.
"""
import uuid
from typing import Any

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.core.errors import GuestIdentityRequired
from storefront.core.owner import GuestOwner, Owner, UserOwner
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository

settings = get_settings()

# Missing Authorization is not an error here; guests have none.
bearer_scheme = HTTPBearer(auto_error=False)

_cart_repo = CartRepository()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and exp; 401 on anything else."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    The signed-in shopper, or None for a guest.

    First sight of a valid token creates a `users` row with role "user";
    admins are promoted in the database, never through the token.
    """
    if credentials is None:
        return None

    claims = decode_access_token(credentials.credentials)
    sub, email = claims.get("sub"), claims.get("email")
    if not sub or not email:
        raise _unauthorized("Token missing sub/email")
    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        raise _unauthorized("Invalid sub in token")

    user = session.get(User, user_id)
    if user is None:
        user = User(id=user_id, email=email, name=email.split("@", 1)[0], role="user")
        session.add(user)
        session.commit()
        session.refresh(user)
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise _unauthorized("Authentication required")
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """Inventory and order administration."""
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def _check_customer(user: User) -> User:
    if user.role != "user":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required",
        )
    return user


def require_user(user: User = Depends(require_auth)) -> User:
    """Carts, checkout, saved cards and order history belong to customers only."""
    return _check_customer(user)


# -------- Cart / order ownership --------


def _customer_owner(user: User) -> UserOwner:
    return UserOwner(_check_customer(user).id)


def get_owner(
    user: User | None = Depends(get_current_user),
    x_guest_id: uuid.UUID | None = Header(default=None),
) -> Owner:
    """
    Resolve who is shopping.

      - authenticated customer => UserOwner
      - otherwise the X-Guest-Id header => GuestOwner

    Raises:
        GuestIdentityRequired(400): guest without X-Guest-Id.
        HTTPException(403): authenticated non-customer (admin).
    """
    if user is not None:
        return _customer_owner(user)
    if x_guest_id is None:
        raise GuestIdentityRequired()
    return GuestOwner(x_guest_id)


def get_or_create_owner(
    user: User | None = Depends(get_current_user),
    x_guest_id: uuid.UUID | None = Header(default=None),
    session: Session = Depends(get_session),
) -> Owner:
    """
    Like get_owner, but a guest without X-Guest-Id gets a fresh guest
    identity (returned to the client in the cart summary).
    """
    if user is not None:
        return _customer_owner(user)
    if x_guest_id is None:
        return _cart_repo.create_guest(session)
    _cart_repo.ensure_guest(session, x_guest_id)
    return GuestOwner(x_guest_id)


def require_guest(
    user: User | None = Depends(get_current_user),
    x_guest_id: uuid.UUID | None = Header(default=None),
) -> GuestOwner:
    """Guest checkout: no bearer token, X-Guest-Id required."""
    if user is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Signed-in customers should use saved-card or new-card checkout",
        )
    if x_guest_id is None:
        raise GuestIdentityRequired()
    return GuestOwner(x_guest_id)
