"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Review")
class ReviewSubmitted:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String()
    comment = Text(required=True)
    verified_purchase = String(max_length=5)
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewEdited:
    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String()
    comment = Text(required=True)
    status = String(required=True)
    edited_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewModerated:
    """An administrator approved or rejected a review."""

    __version__ = 1

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    moderator_id = Identifier()
    admin_note = String()
    moderated_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewVoteRecorded:
    __version__ = 1

    review_id = Identifier(required=True)
    voter_id = Identifier(required=True)
    vote_type = String(required=True)
    helpful_count = Integer(required=True)
    not_helpful_count = Integer(required=True)
    voted_at = DateTime(required=True)
