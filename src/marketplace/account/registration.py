"""User registration on first authentication — command and handler."""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.access.guard import resolve_subject
from marketplace.account.user import User
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="User")
class RegisterUser:
    """Create the user record for an auth subject seen for the first time."""

    external_id: String(required=True, max_length=255)
    name: String(required=True, max_length=200)
    email: String(required=True, max_length=254)
    phone: String(max_length=30)


@marketplace.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        existing = resolve_subject(command.external_id)
        if existing is not None:
            logger.info("User already registered", user_id=str(existing.id))
            return str(existing.id)

        user = User.register(
            external_id=command.external_id,
            name=command.name,
            email=command.email,
            phone=command.phone,
        )
        current_domain.repository_for(User).add(user)
        return str(user.id)
