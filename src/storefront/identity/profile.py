"""Profile and role changes for existing users."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import AccessDeniedError
from storefront.identity.user import User, UserRole

logger = structlog.get_logger(__name__)


@storefront.command(part_of="User")
class UpdateProfile:
    """Change name, phone or avatar. Omitted fields keep their value."""

    user_id: Identifier(required=True)
    first_name: String(max_length=50)
    last_name: String(max_length=50)
    phone: String(max_length=20)
    avatar: String(max_length=500)


@storefront.command(part_of="User")
class ChangeRole:
    user_id: Identifier(required=True)
    role: String(required=True, choices=UserRole)
    actor_id: Identifier(required=True)
    actor_role: String(required=True, max_length=20)


@storefront.command_handler(part_of=User)
class ProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)

        kwargs = {}
        for field in ("first_name", "last_name", "phone", "avatar"):
            value = getattr(command, field)
            if value is not None:
                kwargs[field] = value

        user.update_profile(**kwargs)
        repo.add(user)

    @handle(ChangeRole)
    def change_role(self, command):
        if command.actor_role != UserRole.ADMIN.value:
            raise AccessDeniedError("Only administrators can change roles")

        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        previous = user.role
        user.change_role(command.role, changed_by=command.actor_id)
        repo.add(user)
        logger.info(
            "user_role_changed",
            user_id=str(user.id),
            previous_role=previous,
            new_role=user.role,
            changed_by=str(command.actor_id),
        )
