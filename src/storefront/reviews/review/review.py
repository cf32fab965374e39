"""Review aggregate: one customer's rating of a product from one order.

State Machine:
    pending → approved | rejected
    approved → rejected
    rejected → approved

Only approved reviews count towards a product's rating. Handlers that
change a review whose previous or current status is approved recompute the
product rating in the same unit of work.

A review's identity is derived from its (user, product, order) triple, so the
store itself refuses a second review of the same purchase.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import InvalidTransitionError

MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 1000
MAX_IMAGES = 5

# Namespace for review identities derived from (user, product, order)
REVIEW_ID_NAMESPACE = uuid.UUID("6f1c2a4e-8d3b-5a7e-9c21-4b8e0f6d2a13")

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


def utc_now():
    return datetime.now(timezone.utc)


def review_identity(user_id, product_id, order_id):
    """The one identity a review of ``product_id`` from ``order_id`` by ``user_id`` can have."""
    return str(uuid.uuid5(REVIEW_ID_NAMESPACE, f"{user_id}:{product_id}:{order_id}"))


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VoteType(Enum):
    HELPFUL = "helpful"
    NOT_HELPFUL = "not_helpful"


_VALID_TRANSITIONS = {
    ReviewStatus.PENDING: {ReviewStatus.APPROVED, ReviewStatus.REJECTED},
    ReviewStatus.APPROVED: {ReviewStatus.REJECTED},
    ReviewStatus.REJECTED: {ReviewStatus.APPROVED},
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Review")
class ReviewImage:
    url = String(required=True, max_length=500)
    public_id = String(max_length=255)
    display_order = Integer(default=0)


@storefront.entity(part_of="Review")
class ReviewVote:
    voter_id = Identifier(required=True)
    vote_type = String(choices=VoteType, required=True)
    voted_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)

    rating = ValueObject(Rating, required=True)
    title = String(max_length=100)
    comment = Text(required=True)
    images = HasMany(ReviewImage)

    verified_purchase = Boolean(default=False)
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    admin_note = String(max_length=500)

    votes = HasMany(ReviewVote)
    helpful_count = Integer(default=0, min_value=0)
    not_helpful_count = Integer(default=0, min_value=0)

    is_edited = Boolean(default=False)
    edited_at = DateTime()
    created_at = DateTime(default=utc_now)
    updated_at = DateTime(default=utc_now)

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def comment_length_within_bounds(self):
        length = len(self.comment.strip()) if self.comment else 0
        if length < MIN_COMMENT_LENGTH:
            raise ValidationError({"comment": [f"Comment must be at least {MIN_COMMENT_LENGTH} characters"]})
        if length > MAX_COMMENT_LENGTH:
            raise ValidationError({"comment": [f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters"]})

    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})

    @property
    def is_approved(self):
        return self.status == ReviewStatus.APPROVED.value

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        user_id,
        order_id,
        rating,
        comment,
        title=None,
        images=None,
        verified_purchase=False,
    ):
        from storefront.reviews.review.events import ReviewSubmitted

        images = images or []
        if len(images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})

        now = utc_now()
        review = cls(
            id=review_identity(user_id, product_id, order_id),
            product_id=product_id,
            user_id=user_id,
            order_id=order_id,
            rating=Rating(score=rating),
            title=title.strip() if title else None,
            comment=comment.strip() if comment else comment,
            verified_purchase=verified_purchase,
            status=ReviewStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        for n, img in enumerate(images):
            review.add_images(
                ReviewImage(
                    url=img["url"],
                    public_id=img.get("public_id"),
                    display_order=n,
                )
            )

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                user_id=str(user_id),
                order_id=str(order_id),
                rating=rating,
                title=review.title,
                comment=review.comment,
                verified_purchase=str(verified_purchase),
                image_count=len(images),
                submitted_at=now,
            )
        )
        return review

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def edit(self, rating=_UNSET, title=_UNSET, comment=_UNSET):
        """Change rating, title or comment. Moderation status is left as it is."""
        from storefront.reviews.review.events import ReviewEdited

        now = utc_now()
        with atomic_change(self):
            if rating is not _UNSET:
                self.rating = Rating(score=rating)
            if title is not _UNSET:
                self.title = title.strip() if title else None
            if comment is not _UNSET:
                self.comment = comment.strip() if comment else comment
            self.is_edited = True
            self.edited_at = now
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                rating=self.rating.score,
                title=self.title,
                comment=self.comment,
                status=self.status,
                edited_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = ReviewStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(current.value, target_status.value)

    def moderate(self, status, moderator_id=None, admin_note=None):
        from storefront.reviews.review.events import ReviewModerated

        try:
            target = ReviewStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown review status {status!r}"]}) from None
        self._assert_can_transition(target)

        previous = self.status
        now = utc_now()
        with atomic_change(self):
            self.status = target.value
            if admin_note is not None:
                self.admin_note = admin_note
            self.updated_at = now

        self.raise_(
            ReviewModerated(
                review_id=str(self.id),
                product_id=str(self.product_id),
                previous_status=previous,
                new_status=self.status,
                moderator_id=moderator_id,
                admin_note=admin_note,
                moderated_at=now,
            )
        )

    def approve(self, moderator_id=None, admin_note=None):
        self.moderate(ReviewStatus.APPROVED.value, moderator_id, admin_note)

    def reject(self, moderator_id=None, admin_note=None):
        self.moderate(ReviewStatus.REJECTED.value, moderator_id, admin_note)

    # -------------------------------------------------------------------
    # Voting
    # -------------------------------------------------------------------
    def vote(self, voter_id, vote_type):
        """Record a helpful / not helpful vote.

        Authors cannot vote on their own review and each user votes once.
        """
        from storefront.reviews.review.events import ReviewVoteRecorded

        try:
            vote_type = VoteType(vote_type).value
        except ValueError:
            raise ValidationError({"vote_type": [f"Unknown vote type {vote_type!r}"]}) from None

        if str(voter_id) == str(self.user_id):
            raise ValidationError({"vote": ["Cannot vote on your own review"]})
        if any(str(v.voter_id) == str(voter_id) for v in self.votes):
            raise ValidationError({"vote": ["You have already voted on this review"]})

        now = utc_now()
        with atomic_change(self):
            self.add_votes(ReviewVote(voter_id=voter_id, vote_type=vote_type, voted_at=now))
            if vote_type == VoteType.HELPFUL.value:
                self.helpful_count = (self.helpful_count or 0) + 1
            else:
                self.not_helpful_count = (self.not_helpful_count or 0) + 1
            self.updated_at = now

        self.raise_(
            ReviewVoteRecorded(
                review_id=str(self.id),
                voter_id=str(voter_id),
                vote_type=vote_type,
                helpful_count=self.helpful_count,
                not_helpful_count=self.not_helpful_count,
                voted_at=now,
            )
        )
