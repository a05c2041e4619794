"""Read functions over contact form messages."""

from protean.utils.globals import current_domain

from marketplace.access.guard import require_role
from marketplace.account.user import UserRole
from marketplace.contact.message import ContactMessage
from marketplace.utils.repository import bounded_limit


def list_contact_messages(caller_id, limit=None) -> list[ContactMessage]:
    """Admin inbox of contact form messages, newest first."""
    require_role(caller_id, UserRole.ADMIN.value)
    return (
        current_domain.repository_for(ContactMessage)
        ._dao.query.order_by("-submitted_at")
        .limit(bounded_limit(limit, default=50))
        .all()
        .items
    )
