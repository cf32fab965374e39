"""Category management: commands and handlers."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.domain import storefront
from storefront.shared.slug import slugify


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=100)
    slug: String(max_length=120)
    description: String(max_length=500)
    icon: String(max_length=100)
    parent_id: Identifier()
    display_order: Integer(default=0)


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100)
    slug: String(max_length=120)
    description: String(max_length=500)
    icon: String(max_length=100)


@storefront.command(part_of="Category")
class MoveCategory:
    """Re-parent a category. An empty ``parent_id`` moves it to the root."""

    category_id: Identifier(required=True)
    parent_id: Identifier()


@storefront.command(part_of="Category")
class ReorderCategory:
    category_id: Identifier(required=True)
    new_display_order: Integer(required=True)


@storefront.command(part_of="Category")
class DeactivateCategory:
    category_id: Identifier(required=True)


@storefront.command(part_of="Category")
class ActivateCategory:
    category_id: Identifier(required=True)


def ensure_unique_category(name=None, slug=None, exclude_id=None):
    dao = current_domain.repository_for(Category)._dao
    checks = (("name", name, "Category name is already in use"), ("slug", slug, "Category slug is already in use"))
    for field, value, message in checks:
        if value is None:
            continue
        matches = dao.query.filter(**{field: value}).all().items
        if any(str(c.id) != str(exclude_id) for c in matches):
            raise ValidationError({field: [message]})


def ancestor_ids(parent_id):
    """Yield ids from ``parent_id`` up to the root. Unknown parents raise ObjectNotFoundError."""
    repo = current_domain.repository_for(Category)
    seen = set()
    current = parent_id
    while current is not None and str(current) not in seen:
        seen.add(str(current))
        yield str(current)
        current = repo.get(current).parent_id


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        if command.parent_id:
            repo.get(command.parent_id)

        name = command.name.strip()
        slug = command.slug or slugify(name)
        ensure_unique_category(name=name, slug=slug)

        category = Category.create(
            name=name,
            slug=slug,
            description=command.description,
            icon=command.icon,
            parent_id=command.parent_id,
            display_order=command.display_order or 0,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)

        name = command.name.strip() if command.name else None
        slug = command.slug
        if name is not None and slug is None and name != category.name:
            slug = slugify(name)
        ensure_unique_category(name=name, slug=slug, exclude_id=category.id)

        category.update_details(
            name=name,
            slug=slug,
            description=command.description,
            icon=command.icon,
        )
        repo.add(category)

    @handle(MoveCategory)
    def move_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)

        parent_id = command.parent_id or None
        if parent_id is not None and str(category.id) in ancestor_ids(parent_id):
            raise ValidationError({"parent_id": ["A category cannot be moved under itself or its descendants"]})

        category.move_to(parent_id)
        repo.add(category)

    @handle(ReorderCategory)
    def reorder_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.reorder(command.new_display_order)
        repo.add(category)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        repo.add(category)

    @handle(ActivateCategory)
    def activate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.activate()
        repo.add(category)
