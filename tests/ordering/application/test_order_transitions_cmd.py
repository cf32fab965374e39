"""Application tests for order status transitions and admin notes."""

import pytest
from protean import current_domain

from storefront.catalogue.product.product import Product
from storefront.errors import AccessDeniedError, InvalidTransitionError
from storefront.ordering.order.order import Order
from storefront.ordering.order.transitions import AddAdminNote, TransitionOrder


def _transition(order_id, status, actor_id, actor_role, **extra):
    return current_domain.process(
        TransitionOrder(order_id=order_id, status=status, actor_id=actor_id, actor_role=actor_role, **extra),
        asynchronous=False,
    )


@pytest.fixture()
def ordered(customer_id, make_product, place_order):
    product_id = make_product(stock=5)
    order_id = place_order(customer_id, [(product_id, 2)])
    return order_id, product_id


class TestTransitionOrder:
    def test_admin_advances_order(self, ordered, admin_id):
        order_id, _ = ordered
        assert _transition(order_id, "processing", admin_id, "admin", transaction_id="txn-1") == "processing"
        assert _transition(order_id, "shipped", admin_id, "admin", tracking_number="1Z9") == "shipped"

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "shipped"
        assert order.tracking_number == "1Z9"
        assert order.paid_at is not None

    def test_customer_cancel_restocks(self, ordered, customer_id):
        order_id, product_id = ordered

        assert _transition(order_id, "cancelled", customer_id, "customer", reason="Too slow") == "cancelled"

        product = current_domain.repository_for(Product).get(product_id)
        assert product.stock == 5
        assert product.sold_count == 0

    def test_repeated_cancel_restocks_once(self, ordered, admin_id):
        order_id, product_id = ordered
        _transition(order_id, "cancelled", admin_id, "admin")
        assert _transition(order_id, "cancelled", admin_id, "admin") == "cancelled"
        assert current_domain.repository_for(Product).get(product_id).stock == 5

    def test_customer_cannot_cancel_shipped(self, ordered, customer_id, advance_order):
        order_id, _ = ordered
        advance_order(order_id, "processing", "shipped")
        with pytest.raises(AccessDeniedError):
            _transition(order_id, "cancelled", customer_id, "customer")

    def test_illegal_transition(self, ordered, admin_id):
        order_id, _ = ordered
        with pytest.raises(InvalidTransitionError):
            _transition(order_id, "delivered", admin_id, "admin")


class TestAddAdminNote:
    def test_admin_adds_note(self, ordered, admin_id):
        order_id, _ = ordered
        current_domain.process(
            AddAdminNote(order_id=order_id, note="Gift wrap", actor_id=admin_id, actor_role="admin"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Order).get(order_id).admin_note == "Gift wrap"

    def test_customer_cannot_add_note(self, ordered, customer_id):
        order_id, _ = ordered
        with pytest.raises(AccessDeniedError):
            current_domain.process(
                AddAdminNote(order_id=order_id, note="Please hurry", actor_id=customer_id, actor_role="customer"),
                asynchronous=False,
            )
