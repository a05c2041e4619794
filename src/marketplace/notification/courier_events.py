"""Notifications react to CourierProfile events — application decisions."""

from protean.utils.mixins import handle

from marketplace.courier.events import CourierApplicationReviewed
from marketplace.domain import marketplace
from marketplace.notification.fanout import notify_from_template
from marketplace.notification.notification import Notification, NotificationType

_DECISION_TYPES = {
    "accepted": NotificationType.COURIER_ACCEPTED.value,
    "rejected": NotificationType.COURIER_REJECTED.value,
}


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::courier_profile")
class CourierNotificationHandler:
    @handle(CourierApplicationReviewed)
    def on_courier_application_reviewed(self, event: CourierApplicationReviewed) -> None:
        notification_type = _DECISION_TYPES.get(event.decision)
        if notification_type is None:
            return
        notify_from_template(
            event.user_id,
            notification_type,
            {"courier_profile_id": str(event.courier_profile_id)},
            courier_id=event.courier_profile_id,
        )
