"""Application tests for category management commands."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.category.category import Category
from storefront.catalogue.category.management import (
    ActivateCategory,
    CreateCategory,
    DeactivateCategory,
    MoveCategory,
    ReorderCategory,
    UpdateCategory,
    ancestor_ids,
)


def _create(name, parent_id=None):
    return current_domain.process(CreateCategory(name=name, parent_id=parent_id), asynchronous=False)


def _get(category_id):
    return current_domain.repository_for(Category).get(category_id)


class TestCreateCategory:
    def test_duplicate_name_is_rejected(self):
        _create("Electronics")
        with pytest.raises(ValidationError) as exc_info:
            _create("Electronics")
        assert "name" in exc_info.value.messages

    def test_unknown_parent(self):
        with pytest.raises(ObjectNotFoundError):
            _create("Phones", parent_id="missing")

    def test_update_renames_and_reslugs(self):
        category_id = _create("Electronics")
        current_domain.process(UpdateCategory(category_id=category_id, name="Consumer Electronics"), asynchronous=False)
        category = _get(category_id)
        assert category.name == "Consumer Electronics"
        assert category.slug == "consumer-electronics"


class TestCategoryTree:
    def test_ancestor_ids_walk_to_root(self):
        root = _create("Electronics")
        child = _create("Phones", parent_id=root)
        leaf = _create("Smartphones", parent_id=child)
        assert list(ancestor_ids(leaf)) == [leaf, child, root]

    def test_move_under_descendant_is_rejected(self):
        root = _create("Electronics")
        child = _create("Phones", parent_id=root)

        with pytest.raises(ValidationError) as exc_info:
            current_domain.process(MoveCategory(category_id=root, parent_id=child), asynchronous=False)
        assert "parent_id" in exc_info.value.messages
        assert _get(root).parent_id is None

    def test_move_to_root(self):
        root = _create("Electronics")
        child = _create("Phones", parent_id=root)
        current_domain.process(MoveCategory(category_id=child), asynchronous=False)
        assert _get(child).parent_id is None

    def test_reorder(self):
        category_id = _create("Electronics")
        current_domain.process(ReorderCategory(category_id=category_id, new_display_order=4), asynchronous=False)
        assert _get(category_id).display_order == 4

    def test_deactivate_and_activate(self):
        category_id = _create("Electronics")
        current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
        assert not _get(category_id).is_active
        current_domain.process(ActivateCategory(category_id=category_id), asynchronous=False)
        assert _get(category_id).is_active
