"""Storefront domain: catalogue, identity, ordering and reviews.

All four components share one Protean domain so that order placement,
stock adjustment and rating aggregation commit in a single unit of work.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
