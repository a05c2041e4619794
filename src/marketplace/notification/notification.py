"""Notification aggregate (CQRS) — an in-app inbox entry for one user.

Notifications are created reactively from order, ledger and courier events
and are read, marked read or deleted by their recipient. Metadata is a tagged
union keyed by ``notification_type``: each type names the metadata fields it
requires and those it permits, and anything else is rejected.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.notification.events import NotificationCreated, NotificationRead


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER_AVAILABLE = "order_available"
    ORDER_PLACED = "order_placed"
    ORDER_ASSIGNED = "order_assigned"
    ORDER_COMPLETED = "order_completed"
    DELIVERY_RATED = "delivery_rated"
    ORDER_CANCELLED = "order_cancelled"
    PAYMENT_RECEIVED = "payment_received"
    DEPOSIT_REJECTED = "deposit_rejected"
    COURIER_ACCEPTED = "courier_accepted"
    COURIER_REJECTED = "courier_rejected"
    GENERAL = "general"


METADATA_FIELDS = ("order_id", "courier_id", "amount", "transaction_id", "rating")

# type -> (required, permitted)
_METADATA_SCHEMA = {
    NotificationType.ORDER_AVAILABLE: ({"order_id"}, {"order_id"}),
    NotificationType.ORDER_PLACED: ({"order_id"}, {"order_id"}),
    NotificationType.ORDER_ASSIGNED: ({"order_id", "courier_id"}, {"order_id", "courier_id"}),
    NotificationType.ORDER_COMPLETED: ({"order_id"}, {"order_id", "courier_id"}),
    NotificationType.DELIVERY_RATED: ({"order_id", "rating"}, {"order_id", "rating"}),
    NotificationType.ORDER_CANCELLED: ({"order_id"}, {"order_id"}),
    NotificationType.PAYMENT_RECEIVED: ({"transaction_id", "amount"}, {"transaction_id", "amount"}),
    NotificationType.DEPOSIT_REJECTED: ({"transaction_id", "amount"}, {"transaction_id", "amount"}),
    NotificationType.COURIER_ACCEPTED: ({"courier_id"}, {"courier_id"}),
    NotificationType.COURIER_REJECTED: ({"courier_id"}, {"courier_id"}),
    NotificationType.GENERAL: (set(), set()),
}


def metadata_errors(notification_type, metadata):
    """Return the validation messages for a type/metadata pair, empty when valid."""
    try:
        required, permitted = _METADATA_SCHEMA[NotificationType(notification_type)]
    except ValueError:
        return [f"Unknown notification type: {notification_type}"]

    present = {key for key, value in metadata.items() if value is not None}
    errors = [f"{notification_type} requires {key}" for key in sorted(required - present)]
    errors += [f"{notification_type} does not accept {key}" for key in sorted(present - permitted)]
    return errors


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Notification:
    """A message in a user's inbox."""

    # Recipient
    user_id: Identifier(required=True)

    # Content
    notification_type: String(choices=NotificationType, required=True)
    title: String(required=True, max_length=200)
    message: Text(required=True)
    action_url: String(max_length=500)

    # Metadata
    order_id: Identifier()
    courier_id: Identifier()
    amount: Float()
    transaction_id: Identifier()
    rating: Integer()

    # State
    read: Boolean(default=False)
    read_at: DateTime()
    created_at: DateTime()

    @invariant.post
    def metadata_matches_type(self):
        errors = metadata_errors(self.notification_type, self.attached_metadata)
        if errors:
            raise ValidationError({"metadata": errors})

    @property
    def attached_metadata(self):
        return {key: getattr(self, key) for key in METADATA_FIELDS}

    @classmethod
    def create(cls, user_id, notification_type, title, message, action_url=None, **metadata):
        """Create an unread notification. Metadata keys outside the known set are rejected."""
        unknown = set(metadata) - set(METADATA_FIELDS)
        if unknown:
            raise ValidationError({"metadata": [f"Unknown metadata field: {key}" for key in sorted(unknown)]})

        now = datetime.now(UTC)
        notification = cls(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            action_url=action_url,
            read=False,
            created_at=now,
            **{key: value for key, value in metadata.items() if value is not None},
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                user_id=str(user_id),
                notification_type=notification_type,
                order_id=str(notification.order_id) if notification.order_id else None,
                created_at=now,
            )
        )
        return notification

    def mark_read(self):
        """Idempotent: marking a read notification again changes nothing."""
        if self.read:
            return

        now = datetime.now(UTC)
        self.read = True
        self.read_at = now
        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                read_at=now,
            )
        )
