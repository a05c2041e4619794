"""Courier profiles react to User events."""

from protean.utils.mixins import handle

from marketplace.account.events import UserRoleChanged
from marketplace.account.user import UserRole
from marketplace.courier.onboarding import ensure_profile_for_user
from marketplace.courier.profile import CourierProfile
from marketplace.domain import marketplace


@marketplace.event_handler(part_of=CourierProfile, stream_category="marketplace::user")
class CourierAccountEventHandler:
    @handle(UserRoleChanged)
    def on_user_role_changed(self, event: UserRoleChanged) -> None:
        """Every courier has a profile, including those promoted by an admin."""
        if event.new_role != UserRole.COURIER.value:
            return
        ensure_profile_for_user(event.user_id)
