"""Category aggregate root for the product taxonomy."""

from datetime import datetime, timezone

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront
from storefront.shared.slug import is_url_safe, slugify


def utc_now():
    return datetime.now(timezone.utc)


@storefront.aggregate
class Category:
    """A node in the category tree.

    Parent references always form a tree: a category can never become its own
    ancestor. The tree walk needs other categories, so ``MoveCategory`` checks
    it before calling ``move_to``.
    """

    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120)
    description: String(max_length=500)
    icon: String(max_length=100)
    parent_id: Identifier()
    display_order: Integer(default=0)
    is_active: Boolean(default=True)
    product_count: Integer(default=0, min_value=0)
    created_at: DateTime(default=utc_now)
    updated_at: DateTime(default=utc_now)

    @invariant.post
    def slug_must_be_url_safe(self):
        if not is_url_safe(self.slug):
            raise ValidationError({"slug": [f"Slug {self.slug!r} is not URL-safe"]})

    @invariant.post
    def cannot_be_own_parent(self):
        if self.parent_id is not None and str(self.parent_id) == str(self.id):
            raise ValidationError({"parent_id": ["A category cannot be its own parent"]})

    @classmethod
    def create(cls, name, slug=None, description=None, icon=None, parent_id=None, display_order=0):
        from storefront.catalogue.category.events import CategoryCreated

        now = utc_now()
        category = cls(
            name=name.strip(),
            slug=slug or slugify(name),
            description=description,
            icon=icon,
            parent_id=parent_id,
            display_order=display_order,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=category.name,
                slug=category.slug,
                parent_id=parent_id,
            )
        )
        return category

    def update_details(self, name=None, slug=None, description=None, icon=None):
        from storefront.catalogue.category.events import CategoryDetailsUpdated

        if name is not None:
            self.name = name.strip()
        if slug is not None:
            self.slug = slug
        if description is not None:
            self.description = description
        if icon is not None:
            self.icon = icon
        self.updated_at = utc_now()

        self.raise_(
            CategoryDetailsUpdated(
                category_id=self.id,
                name=self.name,
                slug=self.slug,
            )
        )

    def move_to(self, parent_id):
        from storefront.catalogue.category.events import CategoryMoved

        previous = self.parent_id
        self.parent_id = parent_id
        self.updated_at = utc_now()
        self.raise_(
            CategoryMoved(
                category_id=self.id,
                previous_parent_id=previous,
                new_parent_id=parent_id,
            )
        )

    def reorder(self, new_display_order):
        from storefront.catalogue.category.events import CategoryReordered

        previous_order = self.display_order
        self.display_order = new_display_order
        self.updated_at = utc_now()

        self.raise_(
            CategoryReordered(
                category_id=self.id,
                previous_order=previous_order,
                new_order=new_display_order,
            )
        )

    def deactivate(self):
        from storefront.catalogue.category.events import CategoryDeactivated

        if not self.is_active:
            raise ValidationError({"is_active": ["Category is already inactive"]})

        now = utc_now()
        self.is_active = False
        self.updated_at = now
        self.raise_(CategoryDeactivated(category_id=self.id, deactivated_at=now))

    def activate(self):
        from storefront.catalogue.category.events import CategoryActivated

        if self.is_active:
            raise ValidationError({"is_active": ["Category is already active"]})

        now = utc_now()
        self.is_active = True
        self.updated_at = now
        self.raise_(CategoryActivated(category_id=self.id, activated_at=now))

    def adjust_product_count(self, delta):
        # Never below zero
        self.product_count = max(0, (self.product_count or 0) + delta)
