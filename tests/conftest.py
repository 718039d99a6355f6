"""
Pytest fixtures for storefront tests.

Provides a fresh SQLite database per test, catalog/user/address seed
fixtures, and a FastAPI test client bound to the same database.
"""

import os
import uuid
from decimal import Decimal

from cryptography.fernet import Fernet

# Settings are read once at import time, so configure them first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["CARD_ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ["CVC_HASH_ROUNDS"] = "4"
os.environ["ENABLE_TEST_UTILITIES"] = "true"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel, create_engine, select

from storefront.database import get_session
from storefront.main import app
from storefront.core.owner import Owner, UserOwner
from storefront.models.address import Address
from storefront.models.cart import CartItem
from storefront.models.product import Color, Product, Size, Variant
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.services.payment_authorizer import SimulatedBankAuthorizer

VISA_TEST_CARD = "4111111111111111"
OTHER_TEST_CARD = "4242424242424242"
FUTURE_EXPIRY = "12/2099"
PAST_EXPIRY = "01/2020"


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so several sessions (and threads) share one DB."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


# -------- Catalog --------


def _lookup(session, model, value):
    row = session.exec(select(model).where(model.value == value)).first()
    if row is None:
        row = model(value=value)
        session.add(row)
        session.flush()
    return row


def make_product(session, name="Trail Runner", selling="100.00", sale=None) -> Product:
    product = Product(
        name=name,
        category="running",
        cost_price=Decimal("40.00"),
        selling_price=Decimal(selling),
        on_sale=sale is not None,
        sale_price=Decimal(sale) if sale is not None else None,
    )
    session.add(product)
    session.commit()
    return product


def make_variant(session, product, color="Black", size="9", quantity=10) -> Variant:
    variant = Variant(
        product_id=product.id,
        color_id=_lookup(session, Color, color).id,
        size_id=_lookup(session, Size, size).id,
        quantity=quantity,
    )
    session.add(variant)
    session.commit()
    return variant


def stock_of(session, variant_id) -> int:
    return session.exec(select(Variant.quantity).where(Variant.id == variant_id)).one()


def fill_cart(session, owner: Owner, lines) -> None:
    """lines: iterable of (variant, quantity)."""
    repo = CartRepository()
    cart = repo.get_or_create(session, owner)
    for variant, qty in lines:
        repo.save_item(
            session,
            CartItem(
                cart_id=cart.id,
                product_id=variant.product_id,
                variant_id=variant.id,
                quantity=qty,
            ),
        )
    session.commit()


def expected_cvc(card_number: str) -> str:
    return SimulatedBankAuthorizer().expected_cvc(card_number)


@pytest.fixture
def product(session):
    return make_product(session)


@pytest.fixture
def variant(session, product):
    return make_variant(session, product, quantity=10)


# -------- Identity --------


@pytest.fixture
def user(session):
    user = User(
        id=uuid.uuid4(),
        email="shopper@example.com",
        name="shopper",
        role="user",
    )
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def admin(session):
    admin = User(
        id=uuid.uuid4(),
        email="admin@example.com",
        name="admin",
        role="admin",
    )
    session.add(admin)
    session.commit()
    return admin


@pytest.fixture
def owner(user):
    return UserOwner(user.id)


@pytest.fixture
def address(session, user):
    address = Address(
        user_id=user.id,
        full_name="Sam Shopper",
        phone="555-0100",
        address1="1 Main St",
        city="Springfield",
        state="IL",
        postal_code="62701",
        country="USA",
    )
    session.add(address)
    session.commit()
    return address


def bearer(user: User) -> dict[str, str]:
    token = jwt.encode(
        {"sub": str(user.id), "email": user.email},
        os.environ["JWT_SECRET"],
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(user):
    return bearer(user)


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)
