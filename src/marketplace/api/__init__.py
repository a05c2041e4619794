"""Marketplace API package."""

from marketplace.api.errors import register_exception_handlers
from marketplace.api.routes import (
    contact_router,
    courier_router,
    notification_router,
    order_router,
    stats_router,
    transaction_router,
    upload_router,
    user_router,
)

__all__ = [
    "user_router",
    "courier_router",
    "order_router",
    "transaction_router",
    "notification_router",
    "upload_router",
    "stats_router",
    "contact_router",
    "register_exception_handlers",
]
