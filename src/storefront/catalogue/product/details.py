"""Product details management: command and handler."""

import json

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.creation import ensure_unique_product
from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.shared.slug import slugify


@storefront.command(part_of="Product")
class UpdateProductDetails:
    product_id: Identifier(required=True)
    name: String(max_length=200)
    slug: String(max_length=220)
    description: Text()
    short_description: String(max_length=300)
    category_id: Identifier()
    brand: String(max_length=100)
    price: Float(min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    cost_price: Float(min_value=0.0)
    low_stock_threshold: Integer(min_value=0)
    specifications: Text()
    meta_title: String(max_length=60)
    meta_description: String(max_length=160)


@storefront.command_handler(part_of=Product)
class ManageProductDetailsHandler:
    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        slug = command.slug
        if slug is None and command.name and command.name.strip() != product.name:
            slug = slugify(command.name)
        ensure_unique_product(slug=slug, exclude_id=product.id)

        previous_category_id = product.category_id
        moving = command.category_id is not None and str(command.category_id) != str(previous_category_id)
        if moving:
            category_repo = current_domain.repository_for(Category)
            new_category = category_repo.get(command.category_id)

        product.update_details(
            name=command.name,
            slug=slug,
            description=command.description,
            short_description=command.short_description,
            category_id=command.category_id,
            brand=command.brand,
            price=command.price,
            compare_at_price=command.compare_at_price,
            cost_price=command.cost_price,
            low_stock_threshold=command.low_stock_threshold,
            specifications=json.loads(command.specifications) if command.specifications else None,
            meta_title=command.meta_title,
            meta_description=command.meta_description,
        )
        repo.add(product)

        if moving:
            new_category.adjust_product_count(1)
            category_repo.add(new_category)
            previous = category_repo.get(previous_category_id)
            previous.adjust_product_count(-1)
            category_repo.add(previous)
