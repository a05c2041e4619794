"""Tests for the Order aggregate and its state machine."""

import re

import pytest
from marketplace.errors import Conflict
from marketplace.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
)
from marketplace.order.order import DEFAULT_TOTAL_AMOUNT, Order, OrderStatus, generate_order_number
from protean.exceptions import ValidationError


def _order(**overrides):
    params = {
        "user_id": "user-001",
        "item": "Parcel",
        "pickup_address": "Pickup street",
        "delivery_address": "Delivery street",
        "total_amount": 30.0,
    }
    params.update(overrides)
    order = Order.place(**params)
    return order


def _in_transit_order():
    order = _order()
    order.accept("courier-001")
    order._events.clear()
    return order


class TestOrderNumber:
    def test_format(self):
        assert re.fullmatch(r"ORD-[0-9A-Z]+-[0-9A-Z]{6}", generate_order_number())

    def test_numbers_differ(self):
        assert len({generate_order_number() for _ in range(50)}) == 50


class TestPlaceOrder:
    def test_new_order_is_pending_without_courier(self):
        order = _order()
        assert order.status == OrderStatus.PENDING.value
        assert order.courier_id is None
        assert order.created_at is not None

    def test_delivery_fee_equals_total(self):
        order = _order(total_amount=42.5)
        assert order.delivery_fee == 42.5

    def test_default_amount(self):
        order = _order(total_amount=None)
        assert order.total_amount == DEFAULT_TOTAL_AMOUNT
        assert order.delivery_fee == DEFAULT_TOTAL_AMOUNT

    def test_locations_become_value_objects(self):
        order = _order(pickup_location={"latitude": 33.57, "longitude": -7.59})
        assert order.pickup_location.latitude == 33.57
        assert order.delivery_location is None

    def test_raises_order_placed(self):
        order = _order()
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.order_number == order.order_number
        assert event.total_amount == 30.0

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            _order(total_amount=-1.0)


class TestAcceptOrder:
    def test_accept_assigns_courier(self):
        order = _order()
        order.accept("courier-001")
        assert order.status == OrderStatus.IN_TRANSIT.value
        assert order.courier_id == "courier-001"
        assert order.accepted_at is not None
        assert isinstance(order._events[-1], OrderAccepted)

    def test_second_accept_conflicts(self):
        order = _in_transit_order()
        with pytest.raises(Conflict, match="no longer available"):
            order.accept("courier-002")
        assert order.courier_id == "courier-001"

    def test_cancelled_order_cannot_be_accepted(self):
        order = _order()
        order.cancel()
        with pytest.raises(Conflict):
            order.accept("courier-001")


class TestCancelOrder:
    def test_cancel_pending(self):
        order = _order()
        order.cancel(reason="Changed my mind", cancelled_by="user-001")
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "Changed my mind"
        event = order._events[-1]
        assert isinstance(event, OrderCancelled)
        assert event.previous_status == "pending"
        assert event.courier_id is None

    def test_cancel_in_transit_keeps_courier(self):
        order = _in_transit_order()
        order.cancel()
        assert order.courier_id == "courier-001"
        assert order._events[-1].courier_id == "courier-001"

    def test_cannot_cancel_twice(self):
        order = _order()
        order.cancel()
        with pytest.raises(Conflict):
            order.cancel()

    def test_cannot_cancel_delivered(self):
        order = _in_transit_order()
        order.complete_delivery(rating=5)
        with pytest.raises(Conflict):
            order.cancel()


class TestCompleteDelivery:
    def test_complete_records_rating(self):
        order = _in_transit_order()
        order.complete_delivery(rating=4, review_message="Quick")
        assert order.status == OrderStatus.DELIVERED.value
        assert order.rating.score == 4
        assert order.review_message == "Quick"
        event = order._events[-1]
        assert isinstance(event, OrderDelivered)
        assert event.courier_id == "courier-001"
        assert event.rating == 4

    def test_pending_order_cannot_be_completed(self):
        order = _order()
        with pytest.raises(Conflict):
            order.complete_delivery(rating=5)

    def test_rating_out_of_range_rejected(self):
        order = _in_transit_order()
        with pytest.raises(ValidationError):
            order.complete_delivery(rating=6)


class TestChangeStatus:
    def test_unknown_status(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.change_status("lost")

    def test_pending_to_in_transit_needs_courier(self):
        order = _order()
        with pytest.raises(Conflict):
            order.change_status("in-transit")

    def test_terminal_state_is_final(self):
        order = _order()
        order.change_status("cancelled", changed_by="admin-001")
        with pytest.raises(Conflict):
            order.change_status("pending")

    def test_in_transit_to_delivered(self):
        order = _in_transit_order()
        order.change_status("delivered", changed_by="admin-001")
        assert order.delivered_at is not None
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert event.previous_status == "in-transit"
        assert event.new_status == "delivered"
        assert event.changed_by == "admin-001"

    def test_back_to_pending_not_allowed(self):
        order = _in_transit_order()
        with pytest.raises(Conflict):
            order.change_status("pending")
