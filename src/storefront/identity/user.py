"""User aggregate root with the Address entity."""

from datetime import datetime, timezone
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, String

from storefront.domain import storefront
from storefront.shared.email import is_valid_email, normalize_email

MAX_ADDRESSES = 10

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


def utc_now():
    return datetime.now(timezone.utc)


class UserRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@storefront.entity(part_of="User")
class Address:
    """A saved shipping address. Exactly one address is the default when any exist."""

    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    zip_code: String(required=True, max_length=20)
    country: String(required=True, max_length=100, default="USA")
    is_default: Boolean(default=False)


@storefront.aggregate
class User:
    """A storefront account, either a customer or an administrator.

    Users authenticated by an external provider have no password hash and
    can never log in with a password.
    """

    first_name: String(required=True, max_length=50)
    last_name: String(required=True, max_length=50)
    email: String(required=True, max_length=254)
    password_hash: String(max_length=255)
    role: String(choices=UserRole, default=UserRole.CUSTOMER.value)
    phone: String(max_length=20)
    avatar: String(max_length=500)
    addresses: HasMany(Address)
    last_login_at: DateTime()
    created_at: DateTime(default=utc_now)
    updated_at: DateTime(default=utc_now)

    @invariant.post
    def email_must_be_well_formed(self):
        if not is_valid_email(self.email):
            raise ValidationError({"email": [f"Invalid email address: {self.email!r}"]})

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN.value

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def register(cls, first_name, last_name, email, password_hash=None, phone=None, role=None):
        from storefront.identity.events import UserRegistered

        now = utc_now()
        user = cls(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=normalize_email(email),
            password_hash=password_hash,
            role=role or UserRole.CUSTOMER.value,
            phone=phone,
            created_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=user.id,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                role=user.role,
                has_password=str(password_hash is not None),
                registered_at=now,
            )
        )
        return user

    def record_login(self):
        from storefront.identity.events import UserLoggedIn

        now = utc_now()
        self.last_login_at = now
        self.raise_(UserLoggedIn(user_id=self.id, logged_in_at=now))

    def update_profile(self, first_name=_UNSET, last_name=_UNSET, phone=_UNSET, avatar=_UNSET):
        from storefront.identity.events import ProfileUpdated

        with atomic_change(self):
            if first_name is not _UNSET:
                self.first_name = first_name
            if last_name is not _UNSET:
                self.last_name = last_name
            if phone is not _UNSET:
                self.phone = phone
            if avatar is not _UNSET:
                self.avatar = avatar
            self.updated_at = utc_now()

        self.raise_(
            ProfileUpdated(
                user_id=self.id,
                first_name=self.first_name,
                last_name=self.last_name,
                phone=self.phone,
                avatar=self.avatar,
            )
        )

    def change_role(self, role, changed_by):
        from storefront.identity.events import RoleChanged

        if role not in {r.value for r in UserRole}:
            raise ValidationError({"role": [f"Unknown role {role!r}"]})
        if role == self.role:
            return

        previous = self.role
        self.role = role
        self.updated_at = utc_now()
        self.raise_(
            RoleChanged(
                user_id=self.id,
                previous_role=previous,
                new_role=role,
                changed_by=changed_by,
            )
        )

    def add_address(self, street, city, zip_code, country="USA", state=None, is_default=False):
        from storefront.identity.events import AddressAdded

        # First address is always default
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False

            address = Address(
                street=street,
                city=city,
                state=state,
                zip_code=zip_code,
                country=country or "USA",
                is_default=is_default,
            )
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                user_id=self.id,
                address_id=address.id,
                street=street,
                city=city,
                state=state,
                zip_code=zip_code,
                country=address.country,
                is_default=str(is_default),
            )
        )
        return address

    def remove_address(self, address_id):
        from storefront.identity.events import AddressRemoved

        address = self._find_address(address_id)
        was_default = address.is_default

        with atomic_change(self):
            self.remove_addresses(address)
            if was_default and self.addresses:
                self.addresses[0].is_default = True

        self.raise_(AddressRemoved(user_id=self.id, address_id=address_id))

    def set_default_address(self, address_id):
        from storefront.identity.events import DefaultAddressChanged

        address = self._find_address(address_id)
        previous_default = next((a for a in self.addresses if a.is_default), None)

        with atomic_change(self):
            for addr in self.addresses:
                if addr.is_default:
                    addr.is_default = False
            address.is_default = True

        self.raise_(
            DefaultAddressChanged(
                user_id=self.id,
                address_id=address_id,
                previous_default_address_id=previous_default.id if previous_default else None,
            )
        )

    def _find_address(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ValidationError({"addresses": [f"Address {address_id} not found"]})
        return address
