"""Product lifecycle management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class ActivateProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class ArchiveProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class SetProductFeatured:
    product_id: Identifier(required=True)
    is_featured: Boolean(required=True)


@storefront.command_handler(part_of=Product)
class ManageLifecycleHandler:
    @handle(ActivateProduct)
    def activate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)

    @handle(ArchiveProduct)
    def archive_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.archive()
        repo.add(product)

    @handle(SetProductFeatured)
    def set_featured(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.set_featured(command.is_featured)
        repo.add(product)
