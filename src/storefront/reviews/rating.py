"""Product rating aggregation from approved reviews.

Review handlers call ``recalculate_product_rating`` explicitly, in the same
unit of work as the review write. Changes not yet visible to repository
queries are passed in as ``changed`` / ``removed_id`` and overlaid on the
queried set.
"""

from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.reviews.review.review import Review, ReviewStatus
from storefront.shared.queries import fetch_all

logger = structlog.get_logger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def summarize_ratings(scores):
    """Return ``(average, count)`` with the mean rounded half-up to one decimal.

    >>> summarize_ratings([4, 4, 5, 4])
    (4.3, 4)
    >>> summarize_ratings([])
    (0.0, 0)
    """
    scores = list(scores)
    if not scores:
        return 0.0, 0
    mean = Decimal(sum(scores)) / Decimal(len(scores))
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)), len(scores)


def approved_scores(product_id, changed=None, removed_id=None):
    queryset = current_domain.repository_for(Review)._dao.query.filter(
        product_id=str(product_id),
        status=ReviewStatus.APPROVED.value,
    )
    scores = {str(r.id): r.rating.score for r in fetch_all(queryset)}

    if changed is not None:
        if changed.is_approved:
            scores[str(changed.id)] = changed.rating.score
        else:
            scores.pop(str(changed.id), None)
    if removed_id is not None:
        scores.pop(str(removed_id), None)
    return list(scores.values())


def recalculate_product_rating(product_id, changed=None, removed_id=None):
    """Recompute and store ``average_rating`` / ``review_count`` for a product."""
    average, count = summarize_ratings(approved_scores(product_id, changed=changed, removed_id=removed_id))

    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    product.record_rating(average, count)
    repo.add(product)

    logger.info("product_rating_recalculated", product_id=str(product_id), average_rating=average, review_count=count)
    return average, count


@storefront.command(part_of="Review")
class RecalculateProductRating:
    """Rebuild a product's cached rating from its approved reviews."""

    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Review)
class RecalculateProductRatingHandler:
    @handle(RecalculateProductRating)
    def recalculate(self, command):
        average, count = recalculate_product_rating(command.product_id)
        return {"average_rating": average, "review_count": count}
