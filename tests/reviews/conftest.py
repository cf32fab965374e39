import pytest
from protean import current_domain

from storefront.reviews.review.moderation import ModerateReview
from storefront.reviews.review.submission import SubmitReview


@pytest.fixture()
def purchase(customer_id, make_product, place_order, advance_order):
    """A delivered order of one product by the default customer."""
    product_id = make_product(stock=50)
    order_id = place_order(customer_id, [(product_id, 1)])
    advance_order(order_id, "processing", "shipped", "delivered")
    return {"user_id": customer_id, "product_id": product_id, "order_id": order_id}


@pytest.fixture()
def buyer(make_product, place_order, advance_order, register_user):
    """Register a new customer who has received ``product_id``; returns the purchase ids."""

    def _buyer(product_id, email):
        user_id = register_user(email=email)
        order_id = place_order(user_id, [(product_id, 1)])
        advance_order(order_id, "processing", "shipped", "delivered")
        return {"user_id": user_id, "product_id": product_id, "order_id": order_id}

    return _buyer


@pytest.fixture()
def submit_review():
    def _submit(purchase, rating=4, comment="Comfortable mouse and the battery lasts for weeks.", approve=False):
        review_id = current_domain.process(
            SubmitReview(
                product_id=purchase["product_id"],
                user_id=purchase["user_id"],
                order_id=purchase["order_id"],
                rating=rating,
                comment=comment,
            ),
            asynchronous=False,
        )
        if approve:
            current_domain.process(
                ModerateReview(review_id=review_id, status="approved", moderator_id="admin-1", actor_role="admin"),
                asynchronous=False,
            )
        return review_id

    return _submit
