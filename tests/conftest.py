import json
import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture

TEST_JWT_SECRET = "storefront-test-secret"


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the configuration overlay and signing secret before the domain loads."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["STOREFRONT_JWT_SECRET"] = TEST_JWT_SECRET


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront import elements  # noqa: F401
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(storefront_bed):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Run each test inside the domain context and wipe all data afterwards."""
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
SHIPPING_ADDRESS = {
    "first_name": "Jane",
    "last_name": "Doe",
    "street": "123 Elm Street",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "country": "USA",
    "phone": "+1-555-0123",
}
STANDARD_SHIPPING = {"method_id": "standard", "name": "Standard", "price": 5.0, "estimated_days": "3-5"}
CARD_PAYMENT = {"method": "credit_card", "card_last4": "4242", "card_brand": "visa"}


@pytest.fixture()
def register_user():
    """Register a user through the command bus and return the new user id."""
    from protean import current_domain

    from storefront.identity.registration import RegisterUser

    counter = {"n": 0}

    def _register(email=None, password="correct-horse", first_name="Jane", last_name="Doe"):
        counter["n"] += 1
        return current_domain.process(
            RegisterUser(
                first_name=first_name,
                last_name=last_name,
                email=email or f"user{counter['n']}@example.com",
                password=password,
            ),
            asynchronous=False,
        )

    return _register


@pytest.fixture()
def customer_id(register_user):
    return register_user(email="jane@example.com")


@pytest.fixture()
def admin_id():
    from protean import current_domain

    from storefront.identity.passwords import hash_password
    from storefront.identity.user import User, UserRole

    admin = User.register(
        first_name="Ada",
        last_name="Admin",
        email="admin@example.com",
        password_hash=hash_password("admin-password"),
        role=UserRole.ADMIN.value,
    )
    current_domain.repository_for(User).add(admin)
    return str(admin.id)


@pytest.fixture()
def category_id():
    from protean import current_domain

    from storefront.catalogue.category.management import CreateCategory

    return current_domain.process(CreateCategory(name="Electronics"), asynchronous=False)


@pytest.fixture()
def make_product(category_id):
    """Create a product, active by default, and return its id."""
    from protean import current_domain

    from storefront.catalogue.product.creation import CreateProduct
    from storefront.catalogue.product.lifecycle import ActivateProduct

    counter = {"n": 0}

    def _make(name=None, price=10.0, stock=20, low_stock_threshold=5, activate=True, category=None):
        counter["n"] += 1
        n = counter["n"]
        product_id = current_domain.process(
            CreateProduct(
                name=name or f"Wireless Mouse {n}",
                description="A comfortable wireless mouse.",
                category_id=category or category_id,
                brand="Acme",
                price=price,
                sku=f"sku-{n:03d}",
                stock=stock,
                low_stock_threshold=low_stock_threshold,
                images=json.dumps([{"url": f"https://cdn.example.com/p{n}.jpg", "public_id": f"p{n}"}]),
            ),
            asynchronous=False,
        )
        if activate:
            current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
        return product_id

    return _make


@pytest.fixture()
def place_order():
    """Place an order for ``user_id`` from ``(product_id, quantity)`` lines."""
    from storefront.ordering.order.placement import PlaceOrder, submit_order

    def _place(user_id, lines, tax=0.0, discount=0.0, customer_note=None):
        return submit_order(
            PlaceOrder(
                user_id=user_id,
                items=json.dumps([{"product_id": pid, "quantity": qty} for pid, qty in lines]),
                shipping_address=json.dumps(SHIPPING_ADDRESS),
                shipping_method=json.dumps(STANDARD_SHIPPING),
                payment_details=json.dumps(CARD_PAYMENT),
                tax=tax,
                discount=discount,
                customer_note=customer_note,
            )
        )

    return _place


@pytest.fixture()
def advance_order(admin_id):
    """Move an order through admin transitions, e.g. ``advance_order(oid, "processing", "shipped")``."""
    from protean import current_domain

    from storefront.ordering.order.transitions import TransitionOrder

    def _advance(order_id, *statuses):
        for status in statuses:
            current_domain.process(
                TransitionOrder(order_id=order_id, status=status, actor_id=admin_id, actor_role="admin"),
                asynchronous=False,
            )

    return _advance


@pytest.fixture()
def auth_header():
    """Build an Authorization header for a user id and role."""
    from storefront.identity.tokens import issue_token

    def _header(user_id, role="customer", email="someone@example.com"):
        return {"Authorization": f"Bearer {issue_token(user_id, email, role)}"}

    return _header
