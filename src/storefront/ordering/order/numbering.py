"""Order number allocation.

Numbers look like ``ORD-2026-00042``: the year and a five-digit,
zero-padded sequence. Each year has its own ``OrderSequence`` aggregate
that is advanced and saved in the placing unit of work. A candidate number
that already belongs to an order advances the sequence again, up to
``MAX_ALLOCATION_ATTEMPTS`` times.

The lookup is only a fast path. ``Order.order_number`` is unique and the
sequence is saved with its version checked, so a number handed out twice by
racing units of work is rejected by the store and retried by
``placement.submit_order``.
"""

from datetime import datetime, timezone

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ConcurrencyConflict
from storefront.ordering.order.order import Order

logger = structlog.get_logger(__name__)

MAX_ALLOCATION_ATTEMPTS = 5


def format_order_number(year, sequence):
    return f"ORD-{year:04d}-{sequence:05d}"


def sequence_key(year):
    return f"ORD-{year:04d}"


@storefront.aggregate
class OrderSequence:
    """Last order sequence value handed out for one calendar year."""

    key = Identifier(identifier=True)
    year = Integer(required=True)
    last_value = Integer(default=0, min_value=0)

    def advance(self):
        self.last_value = (self.last_value or 0) + 1
        return format_order_number(self.year, self.last_value)


def order_number_taken(order_number):
    dao = current_domain.repository_for(Order)._dao
    return bool(dao.query.filter(order_number=order_number).all().items)


def _sequence_for(year):
    repo = current_domain.repository_for(OrderSequence)
    try:
        return repo.get(sequence_key(year))
    except ObjectNotFoundError:
        return OrderSequence(key=sequence_key(year), year=year, last_value=0)


def allocate_order_number(year=None):
    """Reserve the next free order number for ``year`` (default: current year).

    Raises ``ConcurrencyConflict`` when every attempt collides with an
    existing order.
    """
    year = year or datetime.now(timezone.utc).year
    sequence = _sequence_for(year)
    repo = current_domain.repository_for(OrderSequence)

    for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
        candidate = sequence.advance()
        if not order_number_taken(candidate):
            repo.add(sequence)
            return candidate
        logger.warning("order_number_collision", order_number=candidate, attempt=attempt)

    repo.add(sequence)
    raise ConcurrencyConflict(
        f"Could not allocate an order number after {MAX_ALLOCATION_ATTEMPTS} attempts",
        attempts=MAX_ALLOCATION_ATTEMPTS,
    )
