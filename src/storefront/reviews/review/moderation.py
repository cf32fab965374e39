"""ModerateReview: an administrator approves or rejects a review."""

import structlog
from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.errors import AccessDeniedError
from storefront.identity.user import UserRole
from storefront.reviews.rating import recalculate_product_rating
from storefront.reviews.review.review import Review, ReviewStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Review")
class ModerateReview:
    review_id = Identifier(required=True)
    status = String(required=True, choices=ReviewStatus)
    moderator_id = Identifier()
    actor_role = String(required=True, choices=UserRole)
    admin_note = String(max_length=500)


@storefront.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ModerateReview)
    def moderate_review(self, command):
        if command.actor_role != UserRole.ADMIN.value:
            raise AccessDeniedError("Only administrators can moderate reviews")

        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        previous_status = review.status

        review.moderate(
            command.status,
            moderator_id=command.moderator_id,
            admin_note=command.admin_note,
        )
        repo.add(review)

        if ReviewStatus.APPROVED.value in (previous_status, review.status):
            recalculate_product_rating(review.product_id, changed=review)

        logger.info(
            "review_moderated",
            review_id=str(review.id),
            previous_status=previous_status,
            new_status=review.status,
        )
