"""Access guard — resolves the caller and enforces role and ownership rules.

Every command handler and read function in the marketplace starts here. The
guard never mutates anything; it only loads the caller's ``User`` record and
raises the matching ``marketplace.errors`` failure when a precondition does
not hold.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.account.user import User, UserRole
from marketplace.errors import Forbidden, InvalidRole, Unauthenticated

logger = structlog.get_logger(__name__)


def resolve_caller(caller_id) -> User | None:
    """Return the caller's user record, or None when it cannot be resolved."""
    if not caller_id:
        return None
    try:
        return current_domain.repository_for(User).get(str(caller_id))
    except ObjectNotFoundError:
        logger.info("Caller not found", caller_id=str(caller_id))
        return None


def resolve_subject(external_id) -> User | None:
    """Map an auth subject (external identity) to its user record."""
    if not external_id:
        return None
    users = current_domain.repository_for(User)._dao.query.filter(external_id=external_id).all().items
    return users[0] if users else None


def _ensure_enabled(user: User) -> User:
    if not user.is_enabled:
        raise Forbidden("Account is disabled")
    return user


def require_caller(caller_id) -> User:
    user = resolve_caller(caller_id)
    if user is None:
        raise Unauthenticated("Unauthenticated")
    return _ensure_enabled(user)


def require_role(caller_id, role) -> User:
    """Return the caller if they hold ``role``; otherwise raise ``InvalidRole``.

    An unresolvable caller is reported as ``InvalidRole`` too, since no
    anonymous caller holds any role. Disabled accounts are ``Forbidden``.
    """
    expected = UserRole(role).value
    user = resolve_caller(caller_id)
    if user is None or user.role != expected:
        raise InvalidRole(f"Only {expected} users can perform this operation")
    return _ensure_enabled(user)


def require_owner_or_admin(user: User, owner_id, message="Not authorized to access this resource") -> None:
    if str(user.id) != str(owner_id) and not user.is_admin:
        raise Forbidden(message)
