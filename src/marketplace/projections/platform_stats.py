"""Platform stats projection — admin dashboard counters.

A single row keyed ``"platform"`` holding user and courier headcounts,
orders by status, revenue from delivered orders and the deposit queue size.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from marketplace.account.events import UserRegistered, UserRoleChanged
from marketplace.account.user import User
from marketplace.domain import marketplace
from marketplace.ledger.events import DepositApproved, DepositRejected, DepositRequested
from marketplace.ledger.transaction import Transaction
from marketplace.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
)
from marketplace.order.order import Order

PLATFORM_KEY = "platform"


@marketplace.projection
class PlatformStats:
    key = String(identifier=True, required=True, max_length=20)
    total_users = Integer(default=0)
    total_couriers = Integer(default=0)
    total_orders = Integer(default=0)
    pending_orders = Integer(default=0)
    in_transit_orders = Integer(default=0)
    delivered_orders = Integer(default=0)
    cancelled_orders = Integer(default=0)
    total_revenue = Float(default=0.0)
    pending_deposits = Integer(default=0)


def status_counter(status):
    """Name of the per-status counter field, e.g. ``in-transit`` → ``in_transit_orders``."""
    return f"{status.replace('-', '_')}_orders"


def _bump(record, field_name, delta):
    setattr(record, field_name, max((getattr(record, field_name) or 0) + delta, 0))


def _get_or_create():
    repo = current_domain.repository_for(PlatformStats)
    try:
        return repo.get(PLATFORM_KEY)
    except ObjectNotFoundError:
        return PlatformStats(
            key=PLATFORM_KEY,
            total_users=0,
            total_couriers=0,
            total_orders=0,
            pending_orders=0,
            in_transit_orders=0,
            delivered_orders=0,
            cancelled_orders=0,
            total_revenue=0.0,
            pending_deposits=0,
        )


def _save(record):
    current_domain.repository_for(PlatformStats).add(record)


@marketplace.projector(projector_for=PlatformStats, aggregates=[User, Order, Transaction])
class PlatformStatsProjector:
    @on(UserRegistered)
    def on_user_registered(self, event):
        record = _get_or_create()
        _bump(record, "total_users", 1)
        _save(record)

    @on(UserRoleChanged)
    def on_user_role_changed(self, event):
        record = _get_or_create()
        if event.previous_role == "courier":
            _bump(record, "total_couriers", -1)
        if event.new_role == "courier":
            _bump(record, "total_couriers", 1)
        _save(record)

    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create()
        _bump(record, "total_orders", 1)
        _bump(record, "pending_orders", 1)
        _save(record)

    @on(OrderAccepted)
    def on_order_accepted(self, event):
        record = _get_or_create()
        _bump(record, "pending_orders", -1)
        _bump(record, "in_transit_orders", 1)
        _save(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create()
        _bump(record, status_counter(event.previous_status), -1)
        _bump(record, "cancelled_orders", 1)
        _save(record)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        record = _get_or_create()
        _bump(record, "in_transit_orders", -1)
        _bump(record, "delivered_orders", 1)
        record.total_revenue = (record.total_revenue or 0.0) + (event.total_amount or 0.0)
        _save(record)

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        record = _get_or_create()
        _bump(record, status_counter(event.previous_status), -1)
        _bump(record, status_counter(event.new_status), 1)
        if event.new_status == "delivered":
            record.total_revenue = (record.total_revenue or 0.0) + (event.total_amount or 0.0)
        _save(record)

    @on(DepositRequested)
    def on_deposit_requested(self, event):
        record = _get_or_create()
        _bump(record, "pending_deposits", 1)
        _save(record)

    @on(DepositApproved)
    def on_deposit_approved(self, event):
        record = _get_or_create()
        _bump(record, "pending_deposits", -1)
        _save(record)

    @on(DepositRejected)
    def on_deposit_rejected(self, event):
        record = _get_or_create()
        _bump(record, "pending_deposits", -1)
        _save(record)
