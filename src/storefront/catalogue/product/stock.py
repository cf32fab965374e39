"""Admin stock corrections and view counting."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class RestockProduct:
    """Set the on-hand quantity to an absolute value."""

    product_id: Identifier(required=True)
    quantity: Integer(required=True, min_value=0)


@storefront.command(part_of="Product")
class RecordProductView:
    product_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageStockHandler:
    @handle(RestockProduct)
    def restock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        previous = product.stock
        product.restock(command.quantity)
        repo.add(product)
        logger.info(
            "product_restocked",
            product_id=str(product.id),
            previous_stock=previous,
            new_stock=product.stock,
        )

    @handle(RecordProductView)
    def record_view(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.record_view()
        repo.add(product)
