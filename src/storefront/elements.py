"""Import every module that registers elements with the storefront domain.

``Domain.init()`` only discovers modules in the domain's folder and the
folders directly below it. Aggregates, commands and handlers that live in
``catalogue/product/``, ``ordering/order/`` and ``reviews/review/`` sit one
level deeper, so entry points import this module before ``init()``.
"""

from storefront.catalogue import catalog  # noqa: F401
from storefront.catalogue.category import category, events as category_events, management  # noqa: F401
from storefront.catalogue.product import (  # noqa: F401
    creation,
    details,
    events as product_events,
    images,
    lifecycle,
    product,
    stock,
)
from storefront.identity import (  # noqa: F401
    addresses,
    authentication,
    events as identity_events,
    profile,
    registration,
    user,
)
from storefront.ordering.cart import cart  # noqa: F401
from storefront.ordering.order import (  # noqa: F401
    events as order_events,
    numbering,
    order,
    placement,
    transitions,
)
from storefront.reviews import rating  # noqa: F401
from storefront.reviews.review import (  # noqa: F401
    editing,
    events as review_events,
    moderation,
    removal,
    review,
    submission,
    voting,
)
