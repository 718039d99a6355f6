"""
Order history, details and reorder.
"""

import uuid

from sqlmodel import select

from conftest import bearer, fill_cart, make_variant
from storefront.models.user import User
from storefront.models.cart import CartItem

API = "/api/v1"


def _checkout(client, session, headers, owner, address, lines):
    client.post(
        f"{API}/payment-cards",
        headers=headers,
        json={"card_number": "4111111111111111", "expiry": "12/2099", "cvc": "123"},
    )
    fill_cart(session, owner, lines)
    resp = client.post(
        f"{API}/checkout/saved-card",
        headers=headers,
        json={"shipping_address_id": str(address.id), "cvc": "123"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["order_summary"]


def test_history_and_details(client, session, auth_headers, owner, address, variant):
    placed = _checkout(client, session, auth_headers, owner, address, [(variant, 2)])

    history = client.get(f"{API}/orders", headers=auth_headers).json()
    assert [o["order_number"] for o in history] == [placed["order_number"]]
    assert history[0]["item_count"] == 2

    detail = client.get(f"{API}/orders/{placed['order_id']}", headers=auth_headers)
    assert detail.status_code == 200
    assert detail.json()["payment"]["message"] == "Payment made from card ending in 1111"


def test_other_users_order_is_not_found(client, session, auth_headers, owner, address, variant):
    placed = _checkout(client, session, auth_headers, owner, address, [(variant, 1)])

    stranger = User(id=uuid.uuid4(), email="other@example.com", name="other")
    session.add(stranger)
    session.commit()

    resp = client.get(f"{API}/orders/{placed['order_id']}", headers=bearer(stranger))
    assert resp.status_code == 404
    assert resp.json() == {"error": "Order not found"}


def test_reorder_reports_out_of_stock(client, session, auth_headers, owner, address, product):
    plenty = make_variant(session, product, color="Black", size="9", quantity=5)
    scarce = make_variant(session, product, color="White", size="10", quantity=1)
    placed = _checkout(
        client, session, auth_headers, owner, address, [(plenty, 1), (scarce, 1)]
    )

    resp = client.post(f"{API}/orders/{placed['order_id']}/reorder", headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["added"] == [str(plenty.id)]
    assert body["out_of_stock"] == [str(scarce.id)]
    items = session.exec(select(CartItem)).all()
    assert [(i.variant_id, i.quantity) for i in items] == [(plenty.id, 1)]
