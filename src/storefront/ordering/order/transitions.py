"""Order status transitions and admin notes: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.catalog import adjust_stock
from storefront.domain import storefront
from storefront.errors import AccessDeniedError
from storefront.identity.user import UserRole
from storefront.ordering.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class TransitionOrder:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=UserRole)
    tracking_number = String(max_length=100)
    carrier = String(max_length=100)
    transaction_id = String(max_length=100)
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class AddAdminNote:
    order_id = Identifier(required=True)
    note = Text(required=True)
    actor_id = Identifier()
    actor_role = String(required=True, choices=UserRole)


@storefront.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(TransitionOrder)
    def transition_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status

        changed = order.transition_to(
            command.status,
            actor_id=command.actor_id,
            actor_role=command.actor_role,
            tracking_number=command.tracking_number,
            carrier=command.carrier,
            transaction_id=command.transaction_id,
            reason=command.reason,
        )
        if not changed:
            logger.info("order_transition_ignored", order_id=str(order.id), status=order.status)
            return order.status

        repo.add(order)

        if order.status == OrderStatus.CANCELLED.value:
            for item in order.items:
                adjust_stock(item.product_id, item.quantity)

        logger.info(
            "order_status_changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous_status,
            new_status=order.status,
            actor_role=command.actor_role,
        )
        return order.status

    @handle(AddAdminNote)
    def add_admin_note(self, command):
        if command.actor_role != UserRole.ADMIN.value:
            raise AccessDeniedError("Only administrators can add order notes")

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.add_admin_note(command.note, added_by=command.actor_id)
        repo.add(order)
