"""Courier stats projection — a courier's own dashboard.

Keyed by the courier's user id: orders currently in transit, delivered
orders, earnings (sum of delivery fees of delivered orders) and the latest
rating figures.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer
from protean.utils.globals import current_domain

from marketplace.courier.events import CourierRated
from marketplace.courier.profile import CourierProfile
from marketplace.domain import marketplace
from marketplace.order.events import OrderAccepted, OrderCancelled, OrderDelivered, OrderStatusChanged
from marketplace.order.order import Order


@marketplace.projection
class CourierStats:
    courier_id = Identifier(identifier=True, required=True)
    active_orders = Integer(default=0)
    delivered_orders = Integer(default=0)
    total_earnings = Float(default=0.0)
    rating = Float()
    rating_count = Integer(default=0)


def _get_or_create(courier_id):
    repo = current_domain.repository_for(CourierStats)
    try:
        return repo.get(str(courier_id))
    except ObjectNotFoundError:
        return CourierStats(
            courier_id=str(courier_id),
            active_orders=0,
            delivered_orders=0,
            total_earnings=0.0,
            rating_count=0,
        )


def _save(record):
    current_domain.repository_for(CourierStats).add(record)


def _record_delivery(record, delivery_fee):
    record.active_orders = max((record.active_orders or 0) - 1, 0)
    record.delivered_orders = (record.delivered_orders or 0) + 1
    record.total_earnings = (record.total_earnings or 0.0) + (delivery_fee or 0.0)


@marketplace.projector(projector_for=CourierStats, aggregates=[Order, CourierProfile])
class CourierStatsProjector:
    @on(OrderAccepted)
    def on_order_accepted(self, event):
        record = _get_or_create(event.courier_id)
        record.active_orders = (record.active_orders or 0) + 1
        _save(record)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        record = _get_or_create(event.courier_id)
        _record_delivery(record, event.delivery_fee)
        _save(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        if not event.courier_id or event.previous_status != "in-transit":
            return
        record = _get_or_create(event.courier_id)
        record.active_orders = max((record.active_orders or 0) - 1, 0)
        _save(record)

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        if not event.courier_id or event.previous_status != "in-transit":
            return
        record = _get_or_create(event.courier_id)
        if event.new_status == "delivered":
            _record_delivery(record, event.delivery_fee)
        else:
            record.active_orders = max((record.active_orders or 0) - 1, 0)
        _save(record)

    @on(CourierRated)
    def on_courier_rated(self, event):
        record = _get_or_create(event.user_id)
        record.rating = event.average_rating
        record.rating_count = event.rating_count
        _save(record)
