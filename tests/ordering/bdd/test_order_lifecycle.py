"""BDD tests for the order lifecycle."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.catalogue.product.product import Product
from storefront.errors import AccessDeniedError, InvalidTransitionError
from storefront.ordering.order.order import Order
from storefront.ordering.order.transitions import TransitionOrder

scenarios("features/order_lifecycle.feature")


@pytest.fixture()
def outcome():
    """Container for the order id and any captured error."""
    return {"order_id": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a customer account", target_fixture="customer")
def customer_account(customer_id):
    return customer_id


@given(
    parsers.cfparse("an active product priced at {price:f} with {stock:d} in stock"),
    target_fixture="product_id",
)
def active_product(make_product, price, stock):
    return make_product(price=price, stock=stock)


@given(parsers.cfparse("the customer has ordered {quantity:d} units"))
def customer_has_ordered(place_order, customer, product_id, outcome, quantity):
    outcome["order_id"] = place_order(customer, [(product_id, quantity)])


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse("the customer orders {quantity:d} units with {tax:f} tax"))
def customer_orders(place_order, customer, product_id, outcome, quantity, tax):
    try:
        outcome["order_id"] = place_order(customer, [(product_id, quantity)], tax=tax)
    except ValidationError as exc:
        outcome["error"] = exc


@given(parsers.cfparse('an administrator moves the order to "{status}"'))
@when(parsers.cfparse('an administrator moves the order to "{status}"'))
def admin_moves_order(admin_id, outcome, status):
    try:
        current_domain.process(
            TransitionOrder(order_id=outcome["order_id"], status=status, actor_id=admin_id, actor_role="admin"),
            asynchronous=False,
        )
    except InvalidTransitionError as exc:
        outcome["error"] = exc


@when("the customer cancels the order")
def customer_cancels(customer, outcome):
    try:
        current_domain.process(
            TransitionOrder(
                order_id=outcome["order_id"],
                status="cancelled",
                actor_id=customer,
                actor_role="customer",
                reason="Changed my mind",
            ),
            asynchronous=False,
        )
    except AccessDeniedError as exc:
        outcome["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
def _order(outcome):
    return current_domain.repository_for(Order).get(outcome["order_id"])


@then(parsers.cfparse("the order subtotal is {amount:f}"))
def order_subtotal(outcome, amount):
    assert _order(outcome).pricing.subtotal == pytest.approx(amount)


@then(parsers.cfparse("the order total is {amount:f}"))
def order_total(outcome, amount):
    assert _order(outcome).pricing.total == pytest.approx(amount)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status(outcome, status):
    assert _order(outcome).status == status


@then(parsers.cfparse("the product stock is {stock:d}"))
def product_stock(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@then("the request is denied")
def request_denied(outcome):
    assert isinstance(outcome["error"], AccessDeniedError)


@then("the transition is rejected")
def transition_rejected(outcome):
    assert isinstance(outcome["error"], InvalidTransitionError)


@then("the order is rejected")
def order_rejected(outcome):
    assert isinstance(outcome["error"], ValidationError)
    assert outcome["order_id"] is None
