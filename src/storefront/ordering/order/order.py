"""Order aggregate: the core of the ordering component.

An order is priced once, from catalogue snapshots taken at placement time,
and its line items never change afterwards. The only post-creation mutation
path is the status state machine:

    pending → processing → shipped → delivered
    pending | processing | shipped → cancelled

``delivered`` and ``cancelled`` are terminal. Requesting the status an order
already has is a no-op, so repeated requests never move timestamps.
"""

import json
from datetime import datetime, timezone
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.errors import AccessDeniedError, InvalidTransitionError
from storefront.identity.user import UserRole
from storefront.shared.money import to_money

MAX_CUSTOMER_NOTE_LENGTH = 500
MAX_ADMIN_NOTE_LENGTH = 1000

# Largest rounding gap tolerated when checking stored totals
_CENT_TOLERANCE = 0.005


def utc_now():
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    PAYPAL = "paypal"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# States from which a customer may cancel their own order
_CUSTOMER_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout and never updated."""

    first_name = String(required=True, max_length=50)
    last_name = String(required=True, max_length=50)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100, default="USA")
    phone = String(required=True, max_length=20)


@storefront.value_object(part_of="Order")
class ShippingMethod:
    method_id = String(required=True, max_length=50)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    estimated_days = String(required=True, max_length=50)


@storefront.value_object(part_of="Order")
class PaymentDetails:
    """Payment information as reported by the payment collaborator.

    Only display-safe card data (last four digits, brand) is ever stored.
    """

    method = String(required=True, choices=PaymentMethod)
    card_last4 = String(max_length=4)
    card_brand = String(max_length=30)
    paypal_email = String(max_length=254)
    paypal_transaction_id = String(max_length=100)
    transaction_id = String(max_length=100)


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Monetary summary. ``total == subtotal + shipping_cost + tax - discount``."""

    subtotal = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A priced line: name, sku and price are copied from the catalogue at placement."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    sku = String(required=True, max_length=64)
    image = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    shipping_method = ValueObject(ShippingMethod)
    payment_details = ValueObject(PaymentDetails)
    pricing = ValueObject(OrderPricing)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    tracking_number = String(max_length=100)
    carrier = String(max_length=100)
    customer_note = String(max_length=MAX_CUSTOMER_NOTE_LENGTH)
    admin_note = Text()
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=20)
    paid_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime(default=utc_now)
    updated_at = DateTime(default=utc_now)

    @invariant.post
    def priced_order_must_have_items(self):
        if self.pricing is not None and not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @invariant.post
    def subtotal_must_match_items(self):
        if self.pricing is None:
            return
        expected = sum(item.subtotal for item in self.items)
        if abs(self.pricing.subtotal - expected) > _CENT_TOLERANCE:
            raise ValidationError({"subtotal": [f"Subtotal {self.pricing.subtotal} does not match items ({expected})"]})

    @invariant.post
    def total_must_balance(self):
        if self.pricing is None:
            return
        p = self.pricing
        expected = p.subtotal + p.shipping_cost + p.tax - p.discount
        if abs(p.total - expected) > _CENT_TOLERANCE:
            raise ValidationError({"total": [f"Total {p.total} does not balance ({expected})"]})
        if p.total < 0:
            raise ValidationError({"total": ["Order total cannot be negative"]})

    @invariant.post
    def admin_note_within_limit(self):
        if self.admin_note and len(self.admin_note) > MAX_ADMIN_NOTE_LENGTH:
            raise ValidationError({"admin_note": [f"Admin note cannot exceed {MAX_ADMIN_NOTE_LENGTH} characters"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        user_id,
        items,
        shipping_address,
        shipping_method,
        payment_details,
        tax=0.0,
        discount=0.0,
        customer_note=None,
    ):
        """Create a priced order.

        Args:
            order_number: Pre-allocated ``ORD-YYYY-NNNNN`` number.
            user_id: The customer placing the order.
            items: List of dicts with product_id, name, sku, price, quantity
                   and optional image, as captured from the catalogue.
            shipping_address: ShippingAddress value object.
            shipping_method: ShippingMethod value object; its price is the
                             shipping cost.
            payment_details: PaymentDetails value object.
        """
        from storefront.ordering.order.events import OrderPlaced

        if not items:
            raise ValidationError({"items": ["An order must contain at least one item"]})
        errors = {}
        if tax is None or tax < 0:
            errors["tax"] = ["Tax cannot be negative"]
        if discount is None or discount < 0:
            errors["discount"] = ["Discount cannot be negative"]
        if customer_note and len(customer_note) > MAX_CUSTOMER_NOTE_LENGTH:
            errors["customer_note"] = [f"Customer note cannot exceed {MAX_CUSTOMER_NOTE_LENGTH} characters"]
        if errors:
            raise ValidationError(errors)

        now = utc_now()
        order = cls(
            order_number=order_number,
            user_id=user_id,
            shipping_address=shipping_address,
            shipping_method=shipping_method,
            payment_details=payment_details,
            customer_note=customer_note,
            created_at=now,
            updated_at=now,
        )

        with atomic_change(order):
            for data in items:
                order.add_items(
                    OrderItem(
                        product_id=data["product_id"],
                        name=data["name"],
                        sku=data["sku"],
                        image=data.get("image"),
                        price=to_money(data["price"]),
                        quantity=data["quantity"],
                        subtotal=to_money(to_money(data["price"]) * data["quantity"]),
                    )
                )
            order._recalculate_pricing(
                shipping_cost=shipping_method.price,
                tax=to_money(tax),
                discount=to_money(discount),
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                items=json.dumps([order._item_snapshot(item) for item in order.items]),
                item_count=sum(item.quantity for item in order.items),
                subtotal=order.pricing.subtotal,
                shipping_cost=order.pricing.shipping_cost,
                tax=order.pricing.tax,
                discount=order.pricing.discount,
                total=order.pricing.total,
                placed_at=now,
            )
        )
        return order

    @staticmethod
    def _item_snapshot(item):
        return {
            "product_id": str(item.product_id),
            "name": item.name,
            "sku": item.sku,
            "price": item.price,
            "quantity": item.quantity,
            "subtotal": item.subtotal,
        }

    def _recalculate_pricing(self, shipping_cost=None, tax=None, discount=None):
        """Recompute subtotal and total from items; never trust stored totals."""
        current = self.pricing
        shipping_cost = shipping_cost if shipping_cost is not None else (current.shipping_cost if current else 0.0)
        tax = tax if tax is not None else (current.tax if current else 0.0)
        discount = discount if discount is not None else (current.discount if current else 0.0)

        subtotal = to_money(sum(item.subtotal for item in self.items))
        total = to_money(subtotal + shipping_cost + tax - discount)
        if total < 0:
            raise ValidationError({"total": ["Discount cannot exceed the order amount"]})

        self.pricing = OrderPricing(
            subtotal=subtotal,
            shipping_cost=to_money(shipping_cost),
            tax=tax,
            discount=discount,
            total=total,
        )

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    @property
    def is_terminal(self):
        return not _VALID_TRANSITIONS[OrderStatus(self.status)]

    def can_transition_to(self, target):
        return OrderStatus(target) in _VALID_TRANSITIONS[OrderStatus(self.status)]

    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidTransitionError(current.value, target_status.value)

    def _assert_actor_may_transition(self, target_status, actor_id, actor_role):
        if actor_role == UserRole.ADMIN.value:
            return
        if actor_role != UserRole.CUSTOMER.value:
            raise AccessDeniedError(f"Unknown actor role {actor_role!r}")
        if str(actor_id) != str(self.user_id):
            raise AccessDeniedError("Customers can only change their own orders")
        if target_status != OrderStatus.CANCELLED:
            raise AccessDeniedError("Only administrators can advance an order")
        if OrderStatus(self.status) not in _CUSTOMER_CANCELLABLE_STATES | {OrderStatus.CANCELLED}:
            raise AccessDeniedError("Shipped orders can only be cancelled by an administrator")

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def transition_to(
        self,
        status,
        actor_id,
        actor_role,
        tracking_number=None,
        carrier=None,
        transaction_id=None,
        reason=None,
    ):
        """Move the order to ``status`` on behalf of an actor.

        Returns True when the status changed and False for a repeated request
        for the current status. Illegal transitions raise
        ``InvalidTransitionError`` whatever the actor's role.
        """
        try:
            target = OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status {status!r}"]}) from None

        if target.value != self.status:
            self._assert_can_transition(target)
        self._assert_actor_may_transition(target, actor_id, actor_role)

        if target.value == self.status:
            return False

        if target == OrderStatus.PROCESSING:
            self.record_payment(transaction_id)
        elif target == OrderStatus.SHIPPED:
            self.mark_shipped(tracking_number, carrier)
        elif target == OrderStatus.DELIVERED:
            self.mark_delivered()
        else:
            self.cancel(reason, cancelled_by=actor_role)
        return True

    def record_payment(self, transaction_id=None):
        from storefront.ordering.order.events import OrderPaymentRecorded

        self._assert_can_transition(OrderStatus.PROCESSING)
        now = utc_now()
        with atomic_change(self):
            self.status = OrderStatus.PROCESSING.value
            if self.paid_at is None:
                self.paid_at = now
            if transaction_id:
                self.payment_details = PaymentDetails(
                    method=self.payment_details.method,
                    card_last4=self.payment_details.card_last4,
                    card_brand=self.payment_details.card_brand,
                    paypal_email=self.payment_details.paypal_email,
                    paypal_transaction_id=self.payment_details.paypal_transaction_id,
                    transaction_id=transaction_id,
                )
            self.updated_at = now

        self.raise_(
            OrderPaymentRecorded(
                order_id=str(self.id),
                order_number=self.order_number,
                transaction_id=transaction_id,
                paid_at=self.paid_at,
            )
        )

    def mark_shipped(self, tracking_number=None, carrier=None):
        from storefront.ordering.order.events import OrderShipped

        self._assert_can_transition(OrderStatus.SHIPPED)
        now = utc_now()
        with atomic_change(self):
            self.status = OrderStatus.SHIPPED.value
            if self.shipped_at is None:
                self.shipped_at = now
            if tracking_number:
                self.tracking_number = tracking_number
            if carrier:
                self.carrier = carrier
            self.updated_at = now

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                order_number=self.order_number,
                tracking_number=self.tracking_number,
                carrier=self.carrier,
                shipped_at=self.shipped_at,
            )
        )

    def mark_delivered(self):
        from storefront.ordering.order.events import OrderDelivered

        self._assert_can_transition(OrderStatus.DELIVERED)
        now = utc_now()
        with atomic_change(self):
            self.status = OrderStatus.DELIVERED.value
            if self.delivered_at is None:
                self.delivered_at = now
            self.updated_at = now

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                order_number=self.order_number,
                delivered_at=self.delivered_at,
            )
        )

    def cancel(self, reason=None, cancelled_by=UserRole.ADMIN.value):
        from storefront.ordering.order.events import OrderCancelled

        self._assert_can_transition(OrderStatus.CANCELLED)
        previous_status = self.status
        now = utc_now()
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            if self.cancelled_at is None:
                self.cancelled_at = now
            self.cancellation_reason = reason
            self.cancelled_by = cancelled_by
            self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous_status,
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=self.cancelled_at,
            )
        )

    def add_admin_note(self, note, added_by=None):
        from storefront.ordering.order.events import OrderNoteAdded

        note = (note or "").strip()
        if not note:
            raise ValidationError({"admin_note": ["Note cannot be empty"]})
        if len(note) > MAX_ADMIN_NOTE_LENGTH:
            raise ValidationError({"admin_note": [f"Admin note cannot exceed {MAX_ADMIN_NOTE_LENGTH} characters"]})

        self.admin_note = note
        self.updated_at = utc_now()
        self.raise_(
            OrderNoteAdded(
                order_id=str(self.id),
                order_number=self.order_number,
                note=note,
                added_by=added_by,
            )
        )

    def contains_product(self, product_id):
        return any(str(item.product_id) == str(product_id) for item in self.items)
