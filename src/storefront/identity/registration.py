"""RegisterUser: create a storefront account."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.passwords import MIN_PASSWORD_LENGTH, hash_password
from storefront.identity.user import User
from storefront.shared.email import ensure_valid_email, normalize_email

logger = structlog.get_logger(__name__)


@storefront.command(part_of="User")
class RegisterUser:
    first_name: String(required=True, max_length=50)
    last_name: String(required=True, max_length=50)
    email: String(required=True, max_length=254)
    password: String(max_length=128)
    phone: String(max_length=20)


def find_user_by_email(email):
    """Return the user registered under ``email`` (case-insensitive), or None."""
    repo = current_domain.repository_for(User)
    matches = repo._dao.query.filter(email=normalize_email(email)).all().items
    return matches[0] if matches else None


@storefront.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        email = normalize_email(command.email)
        ensure_valid_email(email)

        if find_user_by_email(email) is not None:
            raise ValidationError({"email": ["Email is already registered"]})

        password_hash = None
        if command.password is not None:
            if len(command.password) < MIN_PASSWORD_LENGTH:
                raise ValidationError(
                    {"password": [f"Password must be at least {MIN_PASSWORD_LENGTH} characters"]}
                )
            password_hash = hash_password(command.password)

        user = User.register(
            first_name=command.first_name,
            last_name=command.last_name,
            email=email,
            password_hash=password_hash,
            phone=command.phone,
        )
        current_domain.repository_for(User).add(user)
        logger.info("user_registered", user_id=str(user.id), has_password=password_hash is not None)
        return str(user.id)
