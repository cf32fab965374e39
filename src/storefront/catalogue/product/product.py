"""Product aggregate root with the Image entity."""

import json
from datetime import datetime, timezone
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from storefront.domain import storefront
from storefront.errors import InvalidTransitionError
from storefront.shared.slug import is_url_safe, slugify

DEFAULT_LOW_STOCK_THRESHOLD = 10


def utc_now():
    return datetime.now(timezone.utc)


class ProductStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


_VALID_TRANSITIONS = {
    ProductStatus.DRAFT.value: {ProductStatus.ACTIVE.value, ProductStatus.ARCHIVED.value},
    ProductStatus.ACTIVE.value: {ProductStatus.ARCHIVED.value},
    ProductStatus.ARCHIVED.value: {ProductStatus.ACTIVE.value},
}


@storefront.entity(part_of="Product")
class Image:
    url: String(required=True, max_length=500)
    public_id: String(max_length=255)
    alt_text: String(max_length=255)
    is_primary: Boolean(default=False)
    display_order: Integer(default=0)


@storefront.aggregate
class Product:
    """A catalogue entry with live inventory and a cached rating aggregate.

    ``average_rating`` and ``review_count`` are derived from approved reviews
    and only ever written through ``record_rating``.
    """

    name: String(required=True, max_length=200)
    slug: String(required=True, max_length=220)
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
    images: HasMany(Image)
    specifications: Text()  # JSON array of {label, value}
    meta_title: String(max_length=60)
    meta_description: String(max_length=160)
    average_rating: Float(default=0.0, min_value=0.0, max_value=5.0)
    review_count: Integer(default=0, min_value=0)
    sold_count: Integer(default=0, min_value=0)
    view_count: Integer(default=0, min_value=0)
    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    is_featured: Boolean(default=False)
    created_at: DateTime(default=utc_now)
    updated_at: DateTime(default=utc_now)

    @invariant.post
    def slug_must_be_url_safe(self):
        if not is_url_safe(self.slug):
            raise ValidationError({"slug": [f"Slug {self.slug!r} is not URL-safe"]})

    @invariant.post
    def exactly_one_primary_image_when_images_exist(self):
        if not self.images:
            return
        primaries = [i for i in self.images if i.is_primary]
        if len(primaries) != 1:
            raise ValidationError({"images": ["Exactly one image must be marked as primary"]})

    @property
    def is_low_stock(self):
        return self.stock <= self.low_stock_threshold

    @property
    def primary_image(self):
        return next((i for i in self.images if i.is_primary), None)

    @property
    def specification_list(self):
        return json.loads(self.specifications) if self.specifications else []

    @classmethod
    def create(
        cls,
        name,
        description,
        category_id,
        brand,
        price,
        sku,
        images,
        slug=None,
        stock=0,
        low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD,
        short_description=None,
        compare_at_price=None,
        cost_price=None,
        specifications=None,
        meta_title=None,
        meta_description=None,
    ):
        """Create a draft product. ``images`` is a non-empty list of dicts with
        ``url`` and optional ``public_id``, ``alt_text`` and ``is_primary``."""
        from storefront.catalogue.product.events import ProductCreated

        if not images:
            raise ValidationError({"images": ["At least one image is required"]})

        now = utc_now()
        product = cls(
            name=name.strip(),
            slug=slug or slugify(name),
            description=description,
            short_description=short_description,
            category_id=category_id,
            brand=brand.strip(),
            price=price,
            compare_at_price=compare_at_price,
            cost_price=cost_price,
            sku=sku.strip().upper(),
            stock=stock,
            low_stock_threshold=low_stock_threshold,
            specifications=json.dumps(specifications) if specifications else None,
            meta_title=meta_title,
            meta_description=meta_description,
            created_at=now,
            updated_at=now,
        )

        # First image is primary unless another one is marked
        primary_index = next((n for n, img in enumerate(images) if img.get("is_primary")), 0)
        with atomic_change(product):
            for n, img in enumerate(images):
                product.add_images(
                    Image(
                        url=img["url"],
                        public_id=img.get("public_id"),
                        alt_text=img.get("alt_text"),
                        is_primary=n == primary_index,
                        display_order=n,
                    )
                )

        product.raise_(
            ProductCreated(
                product_id=product.id,
                name=product.name,
                slug=product.slug,
                sku=product.sku,
                category_id=category_id,
                price=price,
                stock=product.stock,
                created_at=now,
            )
        )
        return product

    def update_details(
        self,
        name=None,
        slug=None,
        description=None,
        short_description=None,
        category_id=None,
        brand=None,
        price=None,
        compare_at_price=None,
        cost_price=None,
        low_stock_threshold=None,
        specifications=None,
        meta_title=None,
        meta_description=None,
    ):
        from storefront.catalogue.product.events import ProductDetailsUpdated, ProductPriceChanged

        previous_price = self.price
        updates = {
            "name": name.strip() if name is not None else None,
            "slug": slug,
            "description": description,
            "short_description": short_description,
            "category_id": category_id,
            "brand": brand,
            "price": price,
            "compare_at_price": compare_at_price,
            "cost_price": cost_price,
            "low_stock_threshold": low_stock_threshold,
            "specifications": json.dumps(specifications) if specifications is not None else None,
            "meta_title": meta_title,
            "meta_description": meta_description,
        }

        with atomic_change(self):
            for field, value in updates.items():
                if value is not None:
                    setattr(self, field, value)
            self.updated_at = utc_now()

        self.raise_(
            ProductDetailsUpdated(
                product_id=self.id,
                name=self.name,
                slug=self.slug,
                category_id=self.category_id,
            )
        )
        if price is not None and price != previous_price:
            self.raise_(
                ProductPriceChanged(
                    product_id=self.id,
                    previous_price=previous_price,
                    new_price=price,
                )
            )

    def add_image(self, url, public_id=None, alt_text=None, is_primary=False):
        from storefront.catalogue.product.events import ProductImageAdded

        with atomic_change(self):
            if not self.images:
                is_primary = True

            if is_primary:
                for img in self.images:
                    if img.is_primary:
                        img.is_primary = False

            image = Image(
                url=url,
                public_id=public_id,
                alt_text=alt_text,
                is_primary=is_primary,
                display_order=len(self.images),
            )
            self.add_images(image)

        self.updated_at = utc_now()
        self.raise_(
            ProductImageAdded(
                product_id=self.id,
                image_id=image.id,
                url=url,
                is_primary=str(is_primary),
            )
        )
        return image

    def remove_image(self, image_id):
        from storefront.catalogue.product.events import ProductImageRemoved

        image = self._find_image(image_id)
        if len(self.images) <= 1:
            raise ValidationError({"images": ["Cannot remove the last image"]})

        was_primary = image.is_primary
        with atomic_change(self):
            self.remove_images(image)
            if was_primary:
                self.images[0].is_primary = True

        self.updated_at = utc_now()
        self.raise_(ProductImageRemoved(product_id=self.id, image_id=image_id))

    def set_primary_image(self, image_id):
        from storefront.catalogue.product.events import PrimaryImageChanged

        image = self._find_image(image_id)
        if image.is_primary:
            return

        with atomic_change(self):
            for img in self.images:
                if img.is_primary:
                    img.is_primary = False
            image.is_primary = True

        self.updated_at = utc_now()
        self.raise_(PrimaryImageChanged(product_id=self.id, image_id=image_id))

    def _find_image(self, image_id):
        image = next((i for i in self.images if str(i.id) == str(image_id)), None)
        if image is None:
            raise ValidationError({"images": [f"Image {image_id} not found"]})
        return image

    def _assert_can_transition(self, target):
        if target not in _VALID_TRANSITIONS.get(self.status, set()):
            raise InvalidTransitionError(self.status, target)

    def activate(self):
        from storefront.catalogue.product.events import ProductActivated

        self._assert_can_transition(ProductStatus.ACTIVE.value)
        now = utc_now()
        self.status = ProductStatus.ACTIVE.value
        self.updated_at = now
        self.raise_(ProductActivated(product_id=self.id, activated_at=now))

    def archive(self):
        from storefront.catalogue.product.events import ProductArchived

        self._assert_can_transition(ProductStatus.ARCHIVED.value)
        now = utc_now()
        self.status = ProductStatus.ARCHIVED.value
        self.updated_at = now
        self.raise_(ProductArchived(product_id=self.id, archived_at=now))

    def set_featured(self, is_featured):
        from storefront.catalogue.product.events import ProductFeaturedChanged

        if bool(self.is_featured) == bool(is_featured):
            return
        self.is_featured = bool(is_featured)
        self.updated_at = utc_now()
        self.raise_(ProductFeaturedChanged(product_id=self.id, is_featured=str(self.is_featured)))

    def adjust_stock(self, delta):
        """Apply a stock delta. Decrements count as sales, increments undo them.

        Returns True when this adjustment moved stock to or below the
        low-stock threshold.
        """
        from storefront.catalogue.product.events import LowStockReached, StockAdjusted

        previous = self.stock
        new_stock = previous + delta
        if new_stock < 0:
            raise ValidationError(
                {"stock": [f"Insufficient stock for {self.sku}: requested {-delta}, available {previous}"]}
            )

        was_low = self.is_low_stock
        with atomic_change(self):
            self.stock = new_stock
            self.sold_count = max(0, (self.sold_count or 0) - delta)
            self.updated_at = utc_now()

        self.raise_(
            StockAdjusted(
                product_id=self.id,
                delta=delta,
                previous_stock=previous,
                new_stock=new_stock,
            )
        )

        crossed = delta < 0 and not was_low and self.is_low_stock
        if crossed:
            self.raise_(
                LowStockReached(
                    product_id=self.id,
                    sku=self.sku,
                    stock=new_stock,
                    threshold=self.low_stock_threshold,
                )
            )
        return crossed

    def restock(self, quantity):
        """Admin stock correction; does not touch the sold counter."""
        from storefront.catalogue.product.events import StockAdjusted

        if quantity < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        previous = self.stock
        self.stock = quantity
        self.updated_at = utc_now()
        self.raise_(
            StockAdjusted(
                product_id=self.id,
                delta=quantity - previous,
                previous_stock=previous,
                new_stock=quantity,
            )
        )

    def record_view(self):
        self.view_count = (self.view_count or 0) + 1

    def record_rating(self, average_rating, review_count):
        from storefront.catalogue.product.events import ProductRatingRecalculated

        with atomic_change(self):
            self.average_rating = average_rating
            self.review_count = review_count

        self.raise_(
            ProductRatingRecalculated(
                product_id=self.id,
                average_rating=average_rating,
                review_count=review_count,
            )
        )
