"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue as a draft."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    sku: String(required=True)
    category_id: Identifier(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    category_id: Identifier()


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The list price changed. Placed orders keep the price they captured."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_price: Float(required=True)
    new_price: Float(required=True)


@storefront.event(part_of="Product")
class ProductImageAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    image_id: Identifier(required=True)
    url: String(required=True)
    is_primary: String(max_length=5)


@storefront.event(part_of="Product")
class ProductImageRemoved:
    __version__ = 1

    product_id: Identifier(required=True)
    image_id: Identifier(required=True)


@storefront.event(part_of="Product")
class PrimaryImageChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    image_id: Identifier(required=True)


@storefront.event(part_of="Product")
class ProductActivated:
    __version__ = 1

    product_id: Identifier(required=True)
    activated_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductArchived:
    __version__ = 1

    product_id: Identifier(required=True)
    archived_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductFeaturedChanged:
    __version__ = 1

    product_id: Identifier(required=True)
    is_featured: String(max_length=5)


@storefront.event(part_of="Product")
class StockAdjusted:
    __version__ = 1

    product_id: Identifier(required=True)
    delta: Integer(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)


@storefront.event(part_of="Product")
class LowStockReached:
    """Stock fell to or below the product's low-stock threshold."""

    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)
    stock: Integer(required=True)
    threshold: Integer(required=True)


@storefront.event(part_of="Product")
class ProductRatingRecalculated:
    __version__ = 1

    product_id: Identifier(required=True)
    average_rating: Float(required=True)
    review_count: Integer(required=True)
