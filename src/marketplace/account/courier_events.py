"""Users react to CourierProfile events — an accepted application verifies the user."""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.account.user import User
from marketplace.courier.events import CourierApplicationReviewed
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=User, stream_category="marketplace::courier_profile")
class UserCourierEventHandler:
    @handle(CourierApplicationReviewed)
    def on_courier_application_reviewed(self, event: CourierApplicationReviewed) -> None:
        if event.decision != "accepted":
            return

        repo = current_domain.repository_for(User)
        user = repo.get(event.user_id)
        user.verify()
        repo.add(user)
        logger.info("Courier verified", user_id=str(event.user_id))
