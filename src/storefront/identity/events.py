"""Domain events raised by the User aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="User")
class UserRegistered:
    """A new storefront account was created."""

    __version__ = 1

    user_id: Identifier(required=True)
    email: String(required=True, max_length=254)
    first_name: String(required=True, max_length=50)
    last_name: String(required=True, max_length=50)
    role: String(required=True, max_length=20)
    has_password: String(max_length=5)
    registered_at: DateTime(required=True)


@storefront.event(part_of="User")
class UserLoggedIn:
    __version__ = 1

    user_id: Identifier(required=True)
    logged_in_at: DateTime(required=True)


@storefront.event(part_of="User")
class ProfileUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    first_name: String(max_length=50)
    last_name: String(max_length=50)
    phone: String(max_length=20)
    avatar: String(max_length=500)


@storefront.event(part_of="User")
class RoleChanged:
    """An administrator granted or revoked the admin role."""

    __version__ = 1

    user_id: Identifier(required=True)
    previous_role: String(required=True, max_length=20)
    new_role: String(required=True, max_length=20)
    changed_by: Identifier(required=True)


@storefront.event(part_of="User")
class AddressAdded:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    zip_code: String(required=True, max_length=20)
    country: String(required=True, max_length=100)
    is_default: String(max_length=5)


@storefront.event(part_of="User")
class AddressRemoved:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.event(part_of="User")
class DefaultAddressChanged:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    previous_default_address_id: Identifier()
