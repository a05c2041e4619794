"""Notification fanout — create, broadcast and prune inbox entries.

Called from event handlers after the owning transition has committed, so a
failure here never undoes an order or ledger change.
"""

import structlog
from protean.utils.globals import current_domain

from marketplace.account.user import User, UserRole
from marketplace.notification.notification import Notification
from marketplace.notification.templates import render
from marketplace.utils.repository import fetch_all

logger = structlog.get_logger(__name__)


def notify(user_id, notification_type, title, message, action_url=None, **metadata) -> str:
    """Insert one unread notification and return its id."""
    notification = Notification.create(
        user_id=str(user_id),
        notification_type=notification_type,
        title=title,
        message=message,
        action_url=action_url,
        **metadata,
    )
    current_domain.repository_for(Notification).add(notification)
    return str(notification.id)


def notify_from_template(user_id, notification_type, context, action_url=None, **metadata) -> str:
    """``notify`` with the title and message rendered from ``context``."""
    rendered = render(notification_type, context)
    return notify(user_id, notification_type, rendered["title"], rendered["message"], action_url, **metadata)


def eligible_courier_ids() -> list[str]:
    """Enabled courier-role users, computed fresh on every call."""
    couriers = fetch_all(
        current_domain.repository_for(User)._dao.query.filter(role=UserRole.COURIER.value, is_enabled=True)
    )
    return [str(courier.id) for courier in couriers]


def fanout_to_eligible_couriers(notification_type, title, message, action_url=None, **metadata) -> list[str]:
    """One notification per eligible courier. Returns the created ids."""
    notification_ids = [
        notify(courier_id, notification_type, title, message, action_url, **metadata)
        for courier_id in eligible_courier_ids()
    ]
    logger.info(
        "Fanned out notification to couriers",
        notification_type=notification_type,
        recipients=len(notification_ids),
        **{key: str(value) for key, value in metadata.items()},
    )
    return notification_ids


def prune_by_order(order_id, except_user_id=None, notification_type=None) -> int:
    """Delete the notifications referencing ``order_id``.

    ``except_user_id`` spares one recipient's copies; ``notification_type``
    restricts the sweep to one type. A failing delete is logged and the sweep
    continues. Returns the number of notifications deleted.
    """
    repo = current_domain.repository_for(Notification)
    filters = {"order_id": str(order_id)}
    if notification_type:
        filters["notification_type"] = notification_type

    deleted = 0
    for notification in fetch_all(repo._dao.query.filter(**filters)):
        if except_user_id and str(notification.user_id) == str(except_user_id):
            continue
        try:
            repo._dao.delete(notification)
            deleted += 1
        except Exception:
            logger.exception(
                "Failed to delete notification during prune",
                notification_id=str(notification.id),
                order_id=str(order_id),
            )
    return deleted
