"""Application tests for keeping product ratings in step with approved reviews."""

import pytest
from protean import current_domain

from storefront.catalogue.product.product import Product
from storefront.errors import AccessDeniedError
from storefront.reviews.rating import RecalculateProductRating
from storefront.reviews.review.editing import EditReview
from storefront.reviews.review.moderation import ModerateReview
from storefront.reviews.review.removal import DeleteReview
from storefront.reviews.review.review import Review
from storefront.reviews.review.voting import VoteOnReview


def _rating(product_id):
    product = current_domain.repository_for(Product).get(product_id)
    return product.average_rating, product.review_count


def _moderate(review_id, status):
    current_domain.process(
        ModerateReview(review_id=review_id, status=status, moderator_id="admin-1", actor_role="admin"),
        asynchronous=False,
    )


@pytest.fixture()
def four_reviews(purchase, buyer, submit_review):
    """Approved reviews scoring 4, 4, 5 and 4 for the same product."""
    product_id = purchase["product_id"]
    purchases = [purchase] + [buyer(product_id, f"buyer{n}@example.com") for n in range(3)]
    review_ids = [
        submit_review(p, rating=score, approve=True) for p, score in zip(purchases, [4, 4, 5, 4], strict=True)
    ]
    return product_id, review_ids, purchases


class TestRatingRecalculation:
    def test_approved_reviews_are_averaged(self, four_reviews):
        product_id, _, _ = four_reviews
        assert _rating(product_id) == (4.3, 4)

    def test_rejecting_an_approved_review_removes_it(self, four_reviews):
        product_id, review_ids, _ = four_reviews
        _moderate(review_ids[2], "rejected")
        assert _rating(product_id) == (4.0, 3)

    def test_reinstating_a_rejected_review_adds_it_back(self, four_reviews):
        product_id, review_ids, _ = four_reviews
        _moderate(review_ids[2], "rejected")
        _moderate(review_ids[2], "approved")
        assert _rating(product_id) == (4.3, 4)

    def test_editing_an_approved_review_updates_rating(self, four_reviews):
        product_id, review_ids, purchases = four_reviews
        current_domain.process(
            EditReview(review_id=review_ids[0], user_id=purchases[0]["user_id"], rating=1),
            asynchronous=False,
        )
        # 1 + 4 + 5 + 4 = 14 / 4 = 3.5
        assert _rating(product_id) == (3.5, 4)

    def test_deleting_an_approved_review_removes_it(self, four_reviews):
        product_id, review_ids, purchases = four_reviews
        current_domain.process(
            DeleteReview(review_id=review_ids[2], actor_id=purchases[2]["user_id"], actor_role="customer"),
            asynchronous=False,
        )
        assert _rating(product_id) == (4.0, 3)

    def test_deleting_every_review_resets_rating(self, purchase, submit_review):
        review_id = submit_review(purchase, rating=5, approve=True)
        assert _rating(purchase["product_id"]) == (5.0, 1)

        current_domain.process(
            DeleteReview(review_id=review_id, actor_id="admin-1", actor_role="admin"),
            asynchronous=False,
        )
        assert _rating(purchase["product_id"]) == (0.0, 0)

    def test_explicit_recalculation(self, four_reviews):
        product_id, _, _ = four_reviews
        result = current_domain.process(RecalculateProductRating(product_id=product_id), asynchronous=False)
        assert result == {"average_rating": 4.3, "review_count": 4}


class TestAuthorship:
    def test_only_author_can_edit(self, purchase, submit_review):
        review_id = submit_review(purchase)
        with pytest.raises(AccessDeniedError):
            current_domain.process(EditReview(review_id=review_id, user_id="someone-else", rating=1), asynchronous=False)

    def test_other_customer_cannot_delete(self, purchase, submit_review):
        review_id = submit_review(purchase)
        with pytest.raises(AccessDeniedError):
            current_domain.process(
                DeleteReview(review_id=review_id, actor_id="someone-else", actor_role="customer"),
                asynchronous=False,
            )
        assert current_domain.repository_for(Review).get(review_id)

    def test_customer_cannot_moderate(self, purchase, submit_review):
        review_id = submit_review(purchase)
        with pytest.raises(AccessDeniedError):
            current_domain.process(
                ModerateReview(
                    review_id=review_id, status="approved", moderator_id=purchase["user_id"], actor_role="customer"
                ),
                asynchronous=False,
            )

        assert current_domain.repository_for(Review).get(review_id).status == "pending"
        assert _rating(purchase["product_id"]) == (0.0, 0)


class TestVoting:
    def test_vote_is_persisted(self, purchase, submit_review, register_user):
        review_id = submit_review(purchase, approve=True)
        voter = register_user(email="voter@example.com")

        current_domain.process(VoteOnReview(review_id=review_id, voter_id=voter, vote_type="helpful"), asynchronous=False)

        review = current_domain.repository_for(Review).get(review_id)
        assert review.helpful_count == 1
        assert len(review.votes) == 1
