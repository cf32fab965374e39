"""LogIn: exchange email and password for a session token."""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import AuthenticationError
from storefront.identity.passwords import verify_password
from storefront.identity.registration import find_user_by_email
from storefront.identity.tokens import issue_token
from storefront.identity.user import User

logger = structlog.get_logger(__name__)


@storefront.command(part_of="User")
class LogIn:
    email: String(required=True, max_length=254)
    password: String(required=True, max_length=128)


@storefront.command_handler(part_of=User)
class LogInHandler:
    @handle(LogIn)
    def log_in(self, command):
        user = find_user_by_email(command.email)
        # Same message for unknown email and wrong password
        if user is None or not verify_password(command.password, user.password_hash):
            logger.info("login_failed", email=command.email)
            raise AuthenticationError("Invalid email or password")

        user.record_login()
        current_domain.repository_for(User).add(user)
        logger.info("login_succeeded", user_id=str(user.id), role=user.role)
        return issue_token(user.id, user.email, user.role)
