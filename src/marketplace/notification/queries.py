"""Read functions over a user's inbox."""

from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller
from marketplace.notification.notification import Notification
from marketplace.utils.repository import bounded_limit, fetch_all

NOTIFICATIONS_LIMIT = 50


def get_notifications(caller_id, limit=None) -> list[Notification]:
    user = require_caller(caller_id)
    return (
        current_domain.repository_for(Notification)
        ._dao.query.filter(user_id=str(user.id))
        .order_by("-created_at")
        .limit(bounded_limit(limit, NOTIFICATIONS_LIMIT))
        .all()
        .items
    )


def get_unread_count(caller_id) -> int:
    user = require_caller(caller_id)
    query = current_domain.repository_for(Notification)._dao.query.filter(user_id=str(user.id), read=False)
    return len(fetch_all(query))
