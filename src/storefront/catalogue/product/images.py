"""Image management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProductImage:
    product_id: Identifier(required=True)
    url: String(required=True, max_length=500)
    public_id: String(max_length=255)
    alt_text: String(max_length=255)
    is_primary: Boolean(default=False)


@storefront.command(part_of="Product")
class RemoveProductImage:
    product_id: Identifier(required=True)
    image_id: Identifier(required=True)


@storefront.command(part_of="Product")
class SetPrimaryImage:
    product_id: Identifier(required=True)
    image_id: Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageImagesHandler:
    @handle(AddProductImage)
    def add_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        image = product.add_image(
            url=command.url,
            public_id=command.public_id,
            alt_text=command.alt_text,
            is_primary=bool(command.is_primary),
        )
        repo.add(product)
        return str(image.id)

    @handle(RemoveProductImage)
    def remove_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.remove_image(command.image_id)
        repo.add(product)

    @handle(SetPrimaryImage)
    def set_primary_image(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.set_primary_image(command.image_id)
        repo.add(product)
