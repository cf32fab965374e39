"""Domain events for the Category aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryCreated:
    """A new category was added to the taxonomy."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    parent_id: Identifier()


@storefront.event(part_of="Category")
class CategoryDetailsUpdated:
    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)


@storefront.event(part_of="Category")
class CategoryMoved:
    """A category was re-parented within the tree."""

    __version__ = 1

    category_id: Identifier(required=True)
    previous_parent_id: Identifier()
    new_parent_id: Identifier()


@storefront.event(part_of="Category")
class CategoryReordered:
    __version__ = 1

    category_id: Identifier(required=True)
    previous_order: Integer(required=True)
    new_order: Integer(required=True)


@storefront.event(part_of="Category")
class CategoryDeactivated:
    __version__ = 1

    category_id: Identifier(required=True)
    deactivated_at: DateTime(required=True)


@storefront.event(part_of="Category")
class CategoryActivated:
    __version__ = 1

    category_id: Identifier(required=True)
    activated_at: DateTime(required=True)
