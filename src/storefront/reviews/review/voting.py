"""VoteOnReview: record a helpful / not helpful vote.

Cannot vote on own review. Cannot vote twice.
"""

from protean.fields import Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.reviews.review.review import Review, VoteType


@storefront.command(part_of="Review")
class VoteOnReview:
    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    vote_type = String(required=True, choices=VoteType)


@storefront.command_handler(part_of=Review)
class VoteOnReviewHandler:
    @handle(VoteOnReview)
    def vote_on_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get(command.review_id)
        review.vote(voter_id=command.voter_id, vote_type=command.vote_type)
        repo.add(review)
