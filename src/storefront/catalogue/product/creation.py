"""Product creation: command and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import DEFAULT_LOW_STOCK_THRESHOLD, Product
from storefront.domain import storefront
from storefront.shared.slug import slugify

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=200)
    slug: String(max_length=220)
    description: Text(required=True)
    short_description: String(max_length=300)
    category_id: Identifier(required=True)
    brand: String(required=True, max_length=100)
    price: Float(required=True, min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    cost_price: Float(min_value=0.0)
    sku: String(required=True, max_length=64)
    stock: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=DEFAULT_LOW_STOCK_THRESHOLD, min_value=0)
    images: Text(required=True)  # JSON array of {url, public_id, alt_text, is_primary}
    specifications: Text()  # JSON array of {label, value}
    meta_title: String(max_length=60)
    meta_description: String(max_length=160)


def ensure_unique_product(slug=None, sku=None, exclude_id=None):
    dao = current_domain.repository_for(Product)._dao
    checks = (("slug", slug, "Product slug is already in use"), ("sku", sku, "SKU is already in use"))
    for field, value, message in checks:
        if value is None:
            continue
        matches = dao.query.filter(**{field: value}).all().items
        if any(str(p.id) != str(exclude_id) for p in matches):
            raise ValidationError({field: [message]})


@storefront.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        category_repo = current_domain.repository_for(Category)
        category = category_repo.get(command.category_id)

        slug = command.slug or slugify(command.name)
        sku = command.sku.strip().upper()
        ensure_unique_product(slug=slug, sku=sku)

        product = Product.create(
            name=command.name,
            slug=slug,
            description=command.description,
            short_description=command.short_description,
            category_id=command.category_id,
            brand=command.brand,
            price=command.price,
            compare_at_price=command.compare_at_price,
            cost_price=command.cost_price,
            sku=sku,
            stock=command.stock or 0,
            low_stock_threshold=(
                command.low_stock_threshold
                if command.low_stock_threshold is not None
                else DEFAULT_LOW_STOCK_THRESHOLD
            ),
            images=json.loads(command.images),
            specifications=json.loads(command.specifications) if command.specifications else None,
            meta_title=command.meta_title,
            meta_description=command.meta_description,
        )
        current_domain.repository_for(Product).add(product)

        category.adjust_product_count(1)
        category_repo.add(category)

        logger.info("product_created", product_id=str(product.id), sku=product.sku, slug=product.slug)
        return str(product.id)
