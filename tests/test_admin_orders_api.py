"""
Admin order list and details (read-only).
"""

import uuid

from conftest import FUTURE_EXPIRY, OTHER_TEST_CARD, VISA_TEST_CARD, expected_cvc, fill_cart
from storefront.repositories.cart_repo import CartRepository

API = "/api/v1"


def _user_order(client, session, headers, owner, address, variant):
    client.post(
        f"{API}/payment-cards",
        headers=headers,
        json={"card_number": VISA_TEST_CARD, "expiry": FUTURE_EXPIRY, "cvc": "123"},
    )
    fill_cart(session, owner, [(variant, 2)])
    resp = client.post(
        f"{API}/checkout/saved-card",
        headers=headers,
        json={"shipping_address_id": str(address.id), "cvc": "123"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["order_summary"]


def _guest_order(client, session, variant):
    guest = CartRepository().create_guest(session)
    session.commit()
    fill_cart(session, guest, [(variant, 1)])
    resp = client.post(
        f"{API}/checkout/guest",
        headers={"X-Guest-Id": str(guest.id)},
        json={
            "card_number": OTHER_TEST_CARD,
            "expiry": FUTURE_EXPIRY,
            "cvc": expected_cvc(OTHER_TEST_CARD),
            "full_name": "Gale Guest",
            "email": "gale@greenshoes.shop",
            "phone": "555-0199",
            "address1": "9 Elm St",
            "city": "Portland",
            "state": "OR",
            "postal_code": "97201",
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["order_summary"]


class TestAdminOrderList:
    def test_lists_user_and_guest_orders(
        self, client, session, auth_headers, admin_headers, owner, address, variant
    ):
        mine = _user_order(client, session, auth_headers, owner, address, variant)
        theirs = _guest_order(client, session, variant)

        resp = client.get(f"{API}/admin/orders", headers=admin_headers)

        assert resp.status_code == 200
        rows = {row["order_number"]: row for row in resp.json()}
        assert set(rows) == {mine["order_number"], theirs["order_number"]}

        registered = rows[mine["order_number"]]
        assert registered["customer"]["customer_type"] == "REGISTERED"
        assert registered["customer"]["email"] == "shopper@example.com"
        assert registered["item_count"] == 2
        assert registered["total_amount"] == "223.95"
        assert registered["shipping_location"] == "Springfield, IL"

        guest = rows[theirs["order_number"]]
        assert guest["customer"] == {
            "customer_type": "GUEST",
            "name": "Gale Guest",
            "email": "gale@greenshoes.shop",
            "phone": "555-0199",
        }
        assert guest["shipping_location"] == "Portland, OR"

    def test_customer_forbidden(self, client, auth_headers):
        resp = client.get(f"{API}/admin/orders", headers=auth_headers)
        assert resp.status_code == 403

    def test_requires_login(self, client):
        resp = client.get(f"{API}/admin/orders")
        assert resp.status_code == 401


class TestAdminOrderDetail:
    def test_any_order_with_customer(
        self, client, session, admin_headers, variant
    ):
        placed = _guest_order(client, session, variant)

        resp = client.get(f"{API}/admin/orders/{placed['order_id']}", headers=admin_headers)

        assert resp.status_code == 200
        body = resp.json()
        assert body["order_number"] == placed["order_number"]
        assert body["customer"]["customer_type"] == "GUEST"
        assert body["items"][0]["color"] == "Black"
        assert body["items"][0]["size"] == "9"
        assert body["price_breakdown"]["total"] == "117.95"
        assert body["payment"]["card_last4"] == "4242"

    def test_unknown_order(self, client, admin_headers):
        resp = client.get(f"{API}/admin/orders/{uuid.uuid4()}", headers=admin_headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Order not found"}
