"""Read functions over User records."""

from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_role
from marketplace.account.user import User, UserRole
from marketplace.utils.repository import bounded_limit


def get_current_user(caller_id):
    return require_caller(caller_id)


def get_user_by_email(caller_id, email):
    """Admin lookup of a user by email address; None when absent."""
    require_role(caller_id, UserRole.ADMIN.value)
    users = current_domain.repository_for(User)._dao.query.filter(email=email).limit(1).all().items
    return users[0] if users else None


def list_users(caller_id, role=None, limit=None):
    """Admin listing of users, newest registrations first."""
    require_role(caller_id, UserRole.ADMIN.value)
    query = current_domain.repository_for(User)._dao.query
    if role:
        query = query.filter(role=UserRole(role).value)
    return query.order_by("-registered_at").limit(bounded_limit(limit, default=50)).all().items
