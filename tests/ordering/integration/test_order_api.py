"""Integration tests for the cart and order endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.catalogue.catalog import adjust_stock
from storefront.ordering.api import cart_router, order_router
from storefront.ordering.order import numbering
from storefront.utils.http import register_error_handlers

CHECKOUT = {
    "shipping_address": {
        "first_name": "Jane",
        "last_name": "Doe",
        "street": "123 Elm Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "USA",
        "phone": "+1-555-0123",
    },
    "shipping_method": {"method_id": "standard", "name": "Standard", "price": 5.0, "estimated_days": "3-5"},
    "payment_details": {"method": "credit_card", "card_last4": "4242", "card_brand": "visa"},
}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def customer_headers(customer_id, auth_header):
    return auth_header(customer_id, role="customer")


@pytest.fixture()
def admin_headers(admin_id, auth_header):
    return auth_header(admin_id, role="admin")


def _place(client, headers, product_id, quantity=2, **extra):
    payload = {"items": [{"product_id": product_id, "quantity": quantity}], **CHECKOUT, **extra}
    return client.post("/orders", json=payload, headers=headers)


class TestCartAPI:
    def test_validate_prices_lines(self, client, make_product):
        product_id = make_product(price=10.0, stock=5)
        response = client.post("/cart/validate", json={"items": [{"product_id": product_id, "quantity": 2}]})

        body = response.json()
        assert response.status_code == 200
        assert body["valid"] is True
        assert body["subtotal"] == 20.0
        assert body["lines"][0]["subtotal"] == 20.0

    def test_validate_reports_problems(self, client, make_product):
        scarce = make_product(stock=1)
        draft = make_product(activate=False)
        response = client.post(
            "/cart/validate",
            json={"items": [{"product_id": scarce, "quantity": 3}, {"product_id": draft, "quantity": 1}]},
        )

        body = response.json()
        assert body["valid"] is False
        reasons = {issue["product_id"]: issue for issue in body["issues"]}
        assert reasons[scarce]["reason"] == "insufficient_stock"
        assert reasons[scarce]["available"] == 1
        assert reasons[draft]["reason"] == "unavailable"

    def test_validate_reflects_current_stock(self, client, make_product):
        product_id = make_product(stock=5)
        adjust_stock(product_id, -5)
        body = client.post("/cart/validate", json={"items": [{"product_id": product_id, "quantity": 1}]}).json()
        assert body["issues"][0]["available"] == 0


class TestOrderAPI:
    def test_place_and_fetch(self, client, customer_headers, make_product):
        product_id = make_product(price=10.0, stock=5)

        response = _place(client, customer_headers, product_id, tax=1.5)
        assert response.status_code == 201
        order_id = response.json()["order_id"]

        order = client.get(f"/orders/{order_id}", headers=customer_headers).json()
        assert order["total"] == 26.5
        assert order["status"] == "pending"
        assert order["order_number"].startswith("ORD-")

        by_number = client.get(f"/orders/by-number/{order['order_number']}", headers=customer_headers)
        assert by_number.json()["id"] == order_id

    def test_requires_session(self, client, make_product):
        assert _place(client, {}, make_product()).status_code == 401

    def test_insufficient_stock_returns_400(self, client, customer_headers, make_product):
        response = _place(client, customer_headers, make_product(stock=1), quantity=2)
        assert response.status_code == 400

    def test_other_customers_cannot_read_order(self, client, customer_headers, make_product, register_user, auth_header):
        order_id = _place(client, customer_headers, make_product()).json()["order_id"]
        stranger = register_user(email="stranger@example.com")

        response = client.get(f"/orders/{order_id}", headers=auth_header(stranger))
        assert response.status_code == 403

    def test_listing_is_scoped_to_customer(
        self, client, customer_headers, admin_headers, make_product, register_user, auth_header
    ):
        product_id = make_product(stock=10)
        _place(client, customer_headers, product_id, quantity=1)
        other = register_user(email="other@example.com")
        _place(client, auth_header(other), product_id, quantity=1)

        assert len(client.get("/orders", headers=customer_headers).json()) == 1
        assert len(client.get("/orders", headers=admin_headers).json()) == 2

    def test_status_changes_and_conflicts(self, client, customer_headers, admin_headers, make_product):
        order_id = _place(client, customer_headers, make_product()).json()["order_id"]

        response = client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=admin_headers)
        assert response.json() == {"order_id": order_id, "status": "processing"}

        response = client.put(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["current"] == "processing"
        assert response.json()["target"] == "delivered"

    def test_customer_cannot_ship(self, client, customer_headers, make_product):
        order_id = _place(client, customer_headers, make_product()).json()["order_id"]
        response = client.put(f"/orders/{order_id}/status", json={"status": "processing"}, headers=customer_headers)
        assert response.status_code == 403

    def test_number_allocation_exhaustion_returns_503(self, client, customer_headers, make_product, monkeypatch):
        monkeypatch.setattr(numbering, "order_number_taken", lambda _number: True)
        response = _place(client, customer_headers, make_product())
        assert response.status_code == 503
        assert response.headers["Retry-After"] == "1"

    def test_admin_notes(self, client, customer_headers, admin_headers, make_product):
        order_id = _place(client, customer_headers, make_product()).json()["order_id"]
        assert client.post(f"/orders/{order_id}/notes", json={"note": "VIP"}, headers=admin_headers).status_code == 200
        assert client.post(f"/orders/{order_id}/notes", json={"note": "x"}, headers=customer_headers).status_code == 403
