"""Client order stats projection — a client's orders by status and total spent."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
)
from marketplace.order.order import Order
from marketplace.projections.platform_stats import status_counter


@marketplace.projection
class ClientOrderStats:
    user_id = Identifier(identifier=True, required=True)
    total_orders = Integer(default=0)
    pending_orders = Integer(default=0)
    in_transit_orders = Integer(default=0)
    delivered_orders = Integer(default=0)
    cancelled_orders = Integer(default=0)
    total_spent = Float(default=0.0)


def _get_or_create(user_id):
    repo = current_domain.repository_for(ClientOrderStats)
    try:
        return repo.get(str(user_id))
    except ObjectNotFoundError:
        return ClientOrderStats(
            user_id=str(user_id),
            total_orders=0,
            pending_orders=0,
            in_transit_orders=0,
            delivered_orders=0,
            cancelled_orders=0,
            total_spent=0.0,
        )


def _move(record, from_status, to_status):
    from_field = status_counter(from_status)
    setattr(record, from_field, max((getattr(record, from_field) or 0) - 1, 0))
    to_field = status_counter(to_status)
    setattr(record, to_field, (getattr(record, to_field) or 0) + 1)


@marketplace.projector(projector_for=ClientOrderStats, aggregates=[Order])
class ClientOrderStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.user_id)
        record.total_orders = (record.total_orders or 0) + 1
        record.pending_orders = (record.pending_orders or 0) + 1
        current_domain.repository_for(ClientOrderStats).add(record)

    @on(OrderAccepted)
    def on_order_accepted(self, event):
        record = _get_or_create(event.user_id)
        _move(record, "pending", "in-transit")
        current_domain.repository_for(ClientOrderStats).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(event.user_id)
        _move(record, event.previous_status, "cancelled")
        current_domain.repository_for(ClientOrderStats).add(record)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        record = _get_or_create(event.user_id)
        _move(record, "in-transit", "delivered")
        record.total_spent = (record.total_spent or 0.0) + (event.total_amount or 0.0)
        current_domain.repository_for(ClientOrderStats).add(record)

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        record = _get_or_create(event.user_id)
        _move(record, event.previous_status, event.new_status)
        if event.new_status == "delivered":
            record.total_spent = (record.total_spent or 0.0) + (event.total_amount or 0.0)
        current_domain.repository_for(ClientOrderStats).add(record)
