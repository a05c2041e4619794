"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Notification")
class NotificationCreated:
    """A notification landed in a user's inbox."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    notification_type: String(required=True)
    order_id: Identifier()
    created_at: DateTime(required=True)


@marketplace.event(part_of="Notification")
class NotificationRead:
    """The recipient marked a notification as read."""

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    read_at: DateTime(required=True)
