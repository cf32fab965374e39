"""EditReview: the author changes rating, title or comment."""

from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.errors import AccessDeniedError
from storefront.reviews.rating import recalculate_product_rating
from storefront.reviews.review.review import Review


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer()
    title = String(max_length=100)
    comment = Text()


@storefront.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        if str(review.user_id) != str(command.user_id):
            raise AccessDeniedError("Only the author can edit a review")

        kwargs = {}
        if command.rating is not None:
            kwargs["rating"] = command.rating
        if command.title is not None:
            kwargs["title"] = command.title
        if command.comment is not None:
            kwargs["comment"] = command.comment

        review.edit(**kwargs)
        repo.add(review)

        if review.is_approved:
            recalculate_product_rating(review.product_id, changed=review)
