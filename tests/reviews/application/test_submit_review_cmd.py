"""Application tests for submitting reviews."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.errors import AccessDeniedError
from storefront.ordering.order.transitions import TransitionOrder
from storefront.reviews.review import submission
from storefront.reviews.review.review import Review, ReviewStatus, review_identity
from storefront.reviews.review.submission import SubmitReview


def _submit(purchase, **overrides):
    data = {
        "product_id": purchase["product_id"],
        "user_id": purchase["user_id"],
        "order_id": purchase["order_id"],
        "rating": 5,
        "comment": "Comfortable mouse and the battery lasts for weeks.",
    }
    data.update(overrides)
    return current_domain.process(SubmitReview(**data), asynchronous=False)


class TestSubmitReview:
    def test_delivered_order_gives_verified_purchase(self, purchase):
        review = current_domain.repository_for(Review).get(_submit(purchase))
        assert review.status == ReviewStatus.PENDING.value
        assert review.verified_purchase is True

    def test_undelivered_order_is_not_verified(self, customer_id, make_product, place_order):
        product_id = make_product()
        order_id = place_order(customer_id, [(product_id, 1)])
        purchase = {"user_id": customer_id, "product_id": product_id, "order_id": order_id}

        review = current_domain.repository_for(Review).get(_submit(purchase))
        assert review.verified_purchase is False

    def test_duplicate_review_is_rejected(self, purchase):
        _submit(purchase)
        with pytest.raises(ValidationError) as exc_info:
            _submit(purchase, rating=1)
        assert "review" in exc_info.value.messages

    def test_review_identity_comes_from_the_purchase(self, purchase):
        review_id = _submit(purchase)
        assert review_id == review_identity(purchase["user_id"], purchase["product_id"], purchase["order_id"])

    def test_duplicate_missed_by_lookup_collides_on_identity(self, purchase, monkeypatch):
        first_id = _submit(purchase)
        monkeypatch.setattr(submission, "review_exists", lambda *_ids: False)

        with pytest.raises(ValidationError) as exc_info:
            _submit(purchase, rating=1)
        assert "review" in exc_info.value.messages

        reviews = current_domain.repository_for(Review)._dao.query.filter(product_id=purchase["product_id"]).all().items
        assert [str(r.id) for r in reviews] == [first_id]
        assert current_domain.repository_for(Review).get(first_id).rating.score == 5

    def test_product_must_be_in_order(self, purchase, make_product):
        with pytest.raises(ValidationError) as exc_info:
            _submit(purchase, product_id=make_product())
        assert "product_id" in exc_info.value.messages

    def test_order_must_belong_to_reviewer(self, purchase, register_user):
        intruder = register_user(email="intruder@example.com")
        with pytest.raises(AccessDeniedError):
            _submit(purchase, user_id=intruder)

    def test_cancelled_order_cannot_be_reviewed(self, customer_id, make_product, place_order, admin_id):
        product_id = make_product()
        order_id = place_order(customer_id, [(product_id, 1)])
        current_domain.process(
            TransitionOrder(order_id=order_id, status="cancelled", actor_id=admin_id, actor_role="admin"),
            asynchronous=False,
        )
        purchase = {"user_id": customer_id, "product_id": product_id, "order_id": order_id}

        with pytest.raises(ValidationError) as exc_info:
            _submit(purchase)
        assert "order_id" in exc_info.value.messages

    def test_unknown_order(self, purchase):
        with pytest.raises(ObjectNotFoundError):
            _submit(purchase, order_id="no-such-order")

    def test_pending_review_does_not_change_rating(self, purchase):
        from storefront.catalogue.product.product import Product

        _submit(purchase)
        product = current_domain.repository_for(Product).get(purchase["product_id"])
        assert product.review_count == 0
        assert product.average_rating == 0.0
