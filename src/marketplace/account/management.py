"""User profile and administration — commands and handler.

Profile edits are made by the user themselves; role and access changes are
admin-only.
"""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_role
from marketplace.account.user import User, UserRole
from marketplace.domain import marketplace
from marketplace.utils.repository import get_or_raise


@marketplace.command(part_of="User")
class UpdateProfile:
    caller_id: Identifier()
    name: String(required=True, max_length=200)
    phone: String(max_length=30)
    avatar_ref: String(max_length=255)


@marketplace.command(part_of="User")
class ChangeUserRole:
    """Admin assigns one of client, admin or courier to a user."""

    caller_id: Identifier()
    user_id: Identifier(required=True)
    role: String(required=True, choices=UserRole)


@marketplace.command(part_of="User")
class SetUserEnabled:
    """Admin enables or disables a user. Disabled couriers receive no order offers."""

    caller_id: Identifier()
    user_id: Identifier(required=True)
    enabled: Boolean(required=True)


@marketplace.command_handler(part_of=User)
class ManageUserHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        user = require_caller(command.caller_id)
        user.update_profile(
            name=command.name,
            phone=command.phone,
            avatar_ref=command.avatar_ref if command.avatar_ref else user.avatar_ref,
        )
        current_domain.repository_for(User).add(user)

    @handle(ChangeUserRole)
    def change_user_role(self, command):
        admin = require_role(command.caller_id, UserRole.ADMIN.value)
        user = get_or_raise(User, command.user_id, "User not found")
        user.change_role(command.role, changed_by=admin.id)
        current_domain.repository_for(User).add(user)

    @handle(SetUserEnabled)
    def set_user_enabled(self, command):
        admin = require_role(command.caller_id, UserRole.ADMIN.value)
        user = get_or_raise(User, command.user_id, "User not found")
        user.set_enabled(command.enabled, changed_by=admin.id)
        current_domain.repository_for(User).add(user)
