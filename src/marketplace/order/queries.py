"""Read functions over orders.

All listings are newest first and bounded; callers may ask for fewer rows
than the default but never more than the global maximum.
"""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_role
from marketplace.account.user import UserRole
from marketplace.errors import Forbidden
from marketplace.order.order import Order, OrderStatus
from marketplace.utils.repository import bounded_limit, get_or_raise

AVAILABLE_ORDERS_LIMIT = 50
USER_ORDERS_LIMIT = 20
ALL_ORDERS_LIMIT = 100


def _orders():
    return current_domain.repository_for(Order)._dao.query


def get_order(caller_id, order_id) -> Order:
    user = require_caller(caller_id)
    order = get_or_raise(Order, order_id, "Order not found")
    if not order.is_visible_to(user):
        raise Forbidden("Not authorized to view this order")
    return order


def get_available_orders(caller_id, limit=None) -> list[Order]:
    """Pending orders a courier may accept."""
    require_role(caller_id, UserRole.COURIER.value)
    return (
        _orders()
        .filter(status=OrderStatus.PENDING.value)
        .order_by("-created_at")
        .limit(bounded_limit(limit, AVAILABLE_ORDERS_LIMIT))
        .all()
        .items
    )


def get_user_orders(caller_id, limit=None) -> list[Order]:
    user = require_caller(caller_id)
    return (
        _orders()
        .filter(user_id=str(user.id))
        .order_by("-created_at")
        .limit(bounded_limit(limit, USER_ORDERS_LIMIT))
        .all()
        .items
    )


def get_courier_orders(caller_id, limit=None) -> list[Order]:
    """Orders assigned to the calling courier, in any status."""
    courier = require_role(caller_id, UserRole.COURIER.value)
    return (
        _orders()
        .filter(courier_id=str(courier.id))
        .order_by("-created_at")
        .limit(bounded_limit(limit, USER_ORDERS_LIMIT))
        .all()
        .items
    )


def get_all_orders(caller_id, status=None, limit=None) -> list[Order]:
    require_role(caller_id, UserRole.ADMIN.value)
    query = _orders()
    if status:
        if status not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": [f"Unknown order status: {status}"]})
        query = query.filter(status=status)
    return query.order_by("-created_at").limit(bounded_limit(limit, ALL_ORDERS_LIMIT)).all().items


def get_recent_orders(caller_id, limit=None) -> list[Order]:
    require_role(caller_id, UserRole.ADMIN.value)
    return _orders().order_by("-created_at").limit(bounded_limit(limit, USER_ORDERS_LIMIT)).all().items


def search_orders(caller_id, term, limit=None) -> list[Order]:
    """Case-insensitive substring match over order numbers."""
    require_role(caller_id, UserRole.ADMIN.value)
    if not term or not term.strip():
        return []
    return (
        _orders()
        .filter(order_number__icontains=term.strip())
        .order_by("-created_at")
        .limit(bounded_limit(limit, USER_ORDERS_LIMIT))
        .all()
        .items
    )
