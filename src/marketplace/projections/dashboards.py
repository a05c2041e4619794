"""Read functions over the dashboard projections.

A dashboard that has seen no events yet reads as all zeros.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_role
from marketplace.account.user import UserRole
from marketplace.projections.client_order_stats import ClientOrderStats
from marketplace.projections.courier_stats import CourierStats
from marketplace.projections.platform_stats import PLATFORM_KEY, PlatformStats


def _load(projection_cls, key, empty):
    try:
        return current_domain.repository_for(projection_cls).get(str(key)).to_dict()
    except ObjectNotFoundError:
        return empty


def get_platform_stats(caller_id) -> dict:
    require_role(caller_id, UserRole.ADMIN.value)
    return _load(
        PlatformStats,
        PLATFORM_KEY,
        {
            "key": PLATFORM_KEY,
            "total_users": 0,
            "total_couriers": 0,
            "total_orders": 0,
            "pending_orders": 0,
            "in_transit_orders": 0,
            "delivered_orders": 0,
            "cancelled_orders": 0,
            "total_revenue": 0.0,
            "pending_deposits": 0,
        },
    )


def get_courier_stats(caller_id) -> dict:
    courier = require_role(caller_id, UserRole.COURIER.value)
    return _load(
        CourierStats,
        courier.id,
        {
            "courier_id": str(courier.id),
            "active_orders": 0,
            "delivered_orders": 0,
            "total_earnings": 0.0,
            "rating": None,
            "rating_count": 0,
        },
    )


def get_client_order_stats(caller_id) -> dict:
    user = require_caller(caller_id)
    return _load(
        ClientOrderStats,
        user.id,
        {
            "user_id": str(user.id),
            "total_orders": 0,
            "pending_orders": 0,
            "in_transit_orders": 0,
            "delivered_orders": 0,
            "cancelled_orders": 0,
            "total_spent": 0.0,
        },
    )
