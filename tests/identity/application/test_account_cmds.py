"""Application tests for profile, address book and role commands."""

import pytest
from protean import current_domain

from storefront.errors import AccessDeniedError
from storefront.identity.addresses import AddAddress, RemoveAddress, SetDefaultAddress
from storefront.identity.profile import ChangeRole, UpdateProfile
from storefront.identity.user import User


def _user(user_id):
    return current_domain.repository_for(User).get(user_id)


def _add_address(user_id, street="1 Main St", is_default=False):
    return current_domain.process(
        AddAddress(user_id=user_id, street=street, city="Springfield", zip_code="62701", is_default=is_default),
        asynchronous=False,
    )


class TestUpdateProfile:
    def test_only_given_fields_change(self, customer_id):
        current_domain.process(UpdateProfile(user_id=customer_id, phone="+1-555-0199"), asynchronous=False)
        user = _user(customer_id)
        assert user.phone == "+1-555-0199"
        assert user.first_name == "Jane"


class TestAddressCommands:
    def test_add_returns_address_id(self, customer_id):
        address_id = _add_address(customer_id)
        user = _user(customer_id)
        assert [str(a.id) for a in user.addresses] == [address_id]
        assert user.addresses[0].is_default

    def test_set_default_and_remove(self, customer_id):
        first = _add_address(customer_id)
        second = _add_address(customer_id, street="2 Oak Ave")

        current_domain.process(SetDefaultAddress(user_id=customer_id, address_id=second), asynchronous=False)
        defaults = [str(a.id) for a in _user(customer_id).addresses if a.is_default]
        assert defaults == [second]

        current_domain.process(RemoveAddress(user_id=customer_id, address_id=second), asynchronous=False)
        user = _user(customer_id)
        assert [str(a.id) for a in user.addresses] == [first]
        assert user.addresses[0].is_default


class TestChangeRole:
    def test_admin_promotes_customer(self, customer_id, admin_id):
        current_domain.process(
            ChangeRole(user_id=customer_id, role="admin", actor_id=admin_id, actor_role="admin"),
            asynchronous=False,
        )
        assert _user(customer_id).is_admin

    def test_customer_cannot_change_roles(self, customer_id):
        with pytest.raises(AccessDeniedError):
            current_domain.process(
                ChangeRole(user_id=customer_id, role="admin", actor_id=customer_id, actor_role="customer"),
                asynchronous=False,
            )
        assert not _user(customer_id).is_admin
