"""SubmitReview: review a product from one of the reviewer's orders.

The order must belong to the reviewer, contain the product and not be
cancelled. A user reviews a given product once per order.
"""

import json

import structlog
from protean.exceptions import TransactionError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.errors import AccessDeniedError
from storefront.ordering.order.order import Order, OrderStatus
from storefront.reviews.rating import recalculate_product_rating
from storefront.reviews.review.review import Review

logger = structlog.get_logger(__name__)

_ALREADY_REVIEWED = "You have already reviewed this product for this order"


@storefront.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(max_length=100)
    comment = Text(required=True)
    images = Text()  # JSON array of {url, public_id}


def review_exists(user_id, product_id, order_id):
    existing = current_domain.repository_for(Review)._dao.query.filter(
        user_id=str(user_id),
        product_id=str(product_id),
        order_id=str(order_id),
    ).all()
    return bool(existing.items)


@storefront.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        if str(order.user_id) != str(command.user_id):
            raise AccessDeniedError("You can only review products from your own orders")
        if not order.contains_product(command.product_id):
            raise ValidationError({"product_id": ["This product is not part of the order"]})
        if order.status == OrderStatus.CANCELLED.value:
            raise ValidationError({"order_id": ["Cancelled orders cannot be reviewed"]})

        if review_exists(command.user_id, command.product_id, command.order_id):
            raise ValidationError({"review": [_ALREADY_REVIEWED]})

        review = Review.submit(
            product_id=command.product_id,
            user_id=command.user_id,
            order_id=command.order_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            images=json.loads(command.images) if command.images else None,
            verified_purchase=order.status == OrderStatus.DELIVERED.value,
        )
        try:
            current_domain.repository_for(Review).add(review)
        except ValidationError as exc:
            if "id" not in exc.messages:
                raise
            raise ValidationError({"review": [_ALREADY_REVIEWED]}) from exc

        if review.is_approved:
            recalculate_product_rating(review.product_id, changed=review)

        logger.info(
            "review_submitted",
            review_id=str(review.id),
            product_id=str(command.product_id),
            verified_purchase=review.verified_purchase,
        )
        return str(review.id)


def submit_review(command):
    """Process ``SubmitReview`` and return the new review id.

    A concurrent submission for the same purchase that slipped past the
    lookup collides on the review identity when the unit of work commits;
    that is reported as the same ``ValidationError`` as the lookup.
    """
    try:
        return current_domain.process(command, asynchronous=False)
    except TransactionError as exc:
        if (exc.extra_info or {}).get("original_exception") != "IntegrityError":
            raise
        raise ValidationError({"review": [_ALREADY_REVIEWED]}) from exc
