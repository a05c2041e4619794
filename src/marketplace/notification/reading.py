"""Inbox actions by the recipient — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller
from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.notification.notification import Notification
from marketplace.utils.repository import bounded_limit, get_or_raise

MARK_ALL_BATCH_SIZE = 100


@marketplace.command(part_of="Notification")
class MarkNotificationRead:
    caller_id = Identifier()
    notification_id = Identifier(required=True)


@marketplace.command(part_of="Notification")
class MarkAllNotificationsRead:
    """Marks one batch of unread notifications; repeat while ``has_more``."""

    caller_id = Identifier()
    batch_size = Integer()


@marketplace.command(part_of="Notification")
class DeleteNotification:
    caller_id = Identifier()
    notification_id = Identifier(required=True)


def _owned_notification(user, notification_id):
    notification = get_or_raise(Notification, notification_id, "Notification not found")
    if str(notification.user_id) != str(user.id):
        raise Forbidden("Not authorized to access this notification")
    return notification


@marketplace.command_handler(part_of=Notification)
class NotificationInboxHandler:
    @handle(MarkNotificationRead)
    def mark_notification_read(self, command):
        user = require_caller(command.caller_id)
        notification = _owned_notification(user, command.notification_id)
        notification.mark_read()
        current_domain.repository_for(Notification).add(notification)
        return {"success": True}

    @handle(MarkAllNotificationsRead)
    def mark_all_notifications_read(self, command):
        user = require_caller(command.caller_id)
        batch_size = bounded_limit(command.batch_size, MARK_ALL_BATCH_SIZE)

        repo = current_domain.repository_for(Notification)
        # One extra row tells whether another batch remains
        unread = (
            repo._dao.query.filter(user_id=str(user.id), read=False)
            .order_by("created_at")
            .limit(batch_size + 1)
            .all()
            .items
        )
        batch = unread[:batch_size]
        for notification in batch:
            notification.mark_read()
            repo.add(notification)

        return {"marked": len(batch), "has_more": len(unread) > batch_size}

    @handle(DeleteNotification)
    def delete_notification(self, command):
        user = require_caller(command.caller_id)
        notification = _owned_notification(user, command.notification_id)
        current_domain.repository_for(Notification)._dao.delete(notification)
        return {"success": True}
