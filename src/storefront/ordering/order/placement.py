"""PlaceOrder: turn a client cart into a priced, persisted order.

Prices are captured through the catalogue at this instant, the order number
is allocated, the order is saved and stock is decremented, all inside the
command's unit of work.

``submit_order`` is the entry point for callers. It serializes placements
in this process and re-runs the whole command, in a fresh unit of work,
when the store rejects the allocated number (unique ``order_number``, a
concurrently created ``OrderSequence``, or a stale sequence version).
"""

import json
import threading

import structlog
from protean import handle
from protean.exceptions import ExpectedVersionError, TransactionError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.catalog import adjust_stock, get_price_snapshot
from storefront.domain import storefront
from storefront.errors import ConcurrencyConflict
from storefront.identity.user import User
from storefront.ordering.cart.cart import Cart
from storefront.ordering.order.numbering import MAX_ALLOCATION_ATTEMPTS, allocate_order_number
from storefront.ordering.order.order import (
    MAX_CUSTOMER_NOTE_LENGTH,
    Order,
    PaymentDetails,
    ShippingAddress,
    ShippingMethod,
)

logger = structlog.get_logger(__name__)

_ADDRESS_FIELDS = ("first_name", "last_name", "street", "city", "state", "zip_code", "country", "phone")
_METHOD_FIELDS = ("method_id", "name", "price", "estimated_days")
_PAYMENT_FIELDS = (
    "method",
    "card_last4",
    "card_brand",
    "paypal_email",
    "paypal_transaction_id",
    "transaction_id",
)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity}
    shipping_address = Text(required=True)  # JSON: address dict
    shipping_method = Text(required=True)  # JSON: {method_id, name, price, estimated_days}
    payment_details = Text(required=True)  # JSON: payment dict
    tax = Float(default=0.0)
    discount = Float(default=0.0)
    customer_note = String(max_length=MAX_CUSTOMER_NOTE_LENGTH)


def _load(raw, field):
    data = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(data, dict):
        raise ValidationError({field: ["Must be an object"]})
    return data


def _pick(data, fields):
    return {name: data[name] for name in fields if data.get(name) is not None}


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        current_domain.repository_for(User).get(command.user_id)

        raw_items = json.loads(command.items) if isinstance(command.items, str) else command.items
        cart = Cart.from_lines(raw_items)
        if cart.is_empty:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        shipping_address = ShippingAddress(**_pick(_load(command.shipping_address, "shipping_address"), _ADDRESS_FIELDS))
        shipping_method = ShippingMethod(**_pick(_load(command.shipping_method, "shipping_method"), _METHOD_FIELDS))
        payment_details = PaymentDetails(**_pick(_load(command.payment_details, "payment_details"), _PAYMENT_FIELDS))

        items = []
        for line in cart.lines:
            snapshot = get_price_snapshot(line.product_id)
            if snapshot.stock < line.quantity:
                raise ValidationError(
                    {"items": [f"Insufficient stock for {snapshot.sku}: requested {line.quantity}, available {snapshot.stock}"]}
                )
            items.append(
                {
                    "product_id": snapshot.product_id,
                    "name": snapshot.name,
                    "sku": snapshot.sku,
                    "image": snapshot.image,
                    "price": snapshot.price,
                    "quantity": line.quantity,
                }
            )

        order = Order.create(
            order_number=allocate_order_number(),
            user_id=command.user_id,
            items=items,
            shipping_address=shipping_address,
            shipping_method=shipping_method,
            payment_details=payment_details,
            tax=command.tax if command.tax is not None else 0.0,
            discount=command.discount if command.discount is not None else 0.0,
            customer_note=command.customer_note,
        )
        current_domain.repository_for(Order).add(order)

        for item in items:
            adjust_stock(item["product_id"], -item["quantity"])

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            item_count=cart.item_count,
            total=order.pricing.total,
        )
        return str(order.id)


_placement_lock = threading.Lock()

# Fields whose unique constraint guards order numbering
_NUMBERING_FIELDS = {"order_number", "key"}


def _is_numbering_conflict(exc):
    if isinstance(exc, ExpectedVersionError):
        return True
    if isinstance(exc, TransactionError):
        return (exc.extra_info or {}).get("original_exception") == "IntegrityError"
    return bool(_NUMBERING_FIELDS & set(getattr(exc, "messages", {}) or {}))


def submit_order(command):
    """Process ``PlaceOrder`` and return the new order id.

    Raises ``ConcurrencyConflict`` when every attempt is rejected for a
    numbering conflict. Other failures propagate unchanged.
    """
    for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
        try:
            with _placement_lock:
                return current_domain.process(command, asynchronous=False)
        except (ExpectedVersionError, TransactionError, ValidationError) as exc:
            if not _is_numbering_conflict(exc):
                raise
            logger.warning("order_placement_conflict", attempt=attempt, error=str(exc))

    raise ConcurrencyConflict(
        f"Could not place the order after {MAX_ALLOCATION_ATTEMPTS} attempts",
        attempts=MAX_ALLOCATION_ATTEMPTS,
    )
