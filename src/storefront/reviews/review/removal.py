"""DeleteReview: the author or an administrator deletes a review.

Deleting an approved review drops it from the product rating.
"""

import structlog
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.errors import AccessDeniedError
from storefront.identity.user import UserRole
from storefront.reviews.rating import recalculate_product_rating
from storefront.reviews.review.review import Review

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=UserRole)


@storefront.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)

        is_author = str(review.user_id) == str(command.actor_id)
        if not is_author and command.actor_role != UserRole.ADMIN.value:
            raise AccessDeniedError("Only the author or an administrator can delete a review")

        was_approved = review.is_approved
        repo._dao.delete(review)

        if was_approved:
            recalculate_product_rating(review.product_id, removed_id=review.id)

        logger.info(
            "review_deleted",
            review_id=str(review.id),
            product_id=str(review.product_id),
            deleted_by=str(command.actor_id),
            was_approved=was_approved,
        )
