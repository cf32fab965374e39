"""Catalog collaborator interface used by ordering and the HTTP layer.

Ordering never touches Product aggregates directly: it reads prices through
``get_price_snapshot`` and moves inventory through ``adjust_stock``.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import Product, ProductStatus
from storefront.shared.references import expand, reference_to

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PriceSnapshot:
    product_id: str
    name: str
    sku: str
    price: float
    image: str | None
    stock: int


def get_price_snapshot(product_id) -> PriceSnapshot:
    """Capture name, sku, price and primary image of a purchasable product.

    Raises ``ObjectNotFoundError`` when the product does not exist or is not
    active.
    """
    product = current_domain.repository_for(Product).get(product_id)
    if product.status != ProductStatus.ACTIVE.value:
        raise ObjectNotFoundError(f"Product {product_id} is not available for purchase")

    primary = product.primary_image
    return PriceSnapshot(
        product_id=str(product.id),
        name=product.name,
        sku=product.sku,
        price=product.price,
        image=primary.url if primary else None,
        stock=product.stock,
    )


def adjust_stock(product_id, delta) -> Product:
    """Move on-hand stock by ``delta`` within the current unit of work.

    Raises ``ValidationError`` when a decrement exceeds available stock.
    """
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    crossed = product.adjust_stock(delta)
    repo.add(product)

    logger.info("stock_adjusted", product_id=str(product.id), delta=delta, stock=product.stock)
    if crossed:
        logger.warning(
            "low_stock_reached",
            product_id=str(product.id),
            sku=product.sku,
            stock=product.stock,
            threshold=product.low_stock_threshold,
        )
    return product


def _category_record(category_id):
    try:
        category = current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError:
        return None
    return {"name": category.name, "slug": category.slug, "is_active": category.is_active}


def product_view(product, expand_category=False) -> dict:
    """Render a product for clients.

    The category is a ``Reference`` unless the caller asks for it expanded.
    """
    category = (
        expand(product.category_id, _category_record) if expand_category else reference_to(product.category_id)
    )
    return {
        "id": str(product.id),
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "short_description": product.short_description,
        "category": category.to_dict() if category else None,
        "brand": product.brand,
        "price": product.price,
        "compare_at_price": product.compare_at_price,
        "sku": product.sku,
        "stock": product.stock,
        "is_low_stock": product.is_low_stock,
        "images": [
            {
                "id": str(i.id),
                "url": i.url,
                "public_id": i.public_id,
                "alt_text": i.alt_text,
                "is_primary": bool(i.is_primary),
            }
            for i in sorted(product.images, key=lambda i: i.display_order or 0)
        ],
        "specifications": product.specification_list,
        "meta_title": product.meta_title,
        "meta_description": product.meta_description,
        "average_rating": product.average_rating,
        "review_count": product.review_count,
        "sold_count": product.sold_count,
        "view_count": product.view_count,
        "status": product.status,
        "is_featured": bool(product.is_featured),
    }
