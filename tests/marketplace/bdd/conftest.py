"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from marketplace.errors import Conflict
from marketplace.order.events import OrderAccepted, OrderCancelled, OrderDelivered, OrderPlaced
from marketplace.order.order import Order
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderAccepted": OrderAccepted,
    "OrderDelivered": OrderDelivered,
    "OrderCancelled": OrderCancelled,
}


@pytest.fixture()
def error():
    """Container for the failure an action raised, if any."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps — Order
# ---------------------------------------------------------------------------
@given("a pending order", target_fixture="order")
def pending_order():
    order = Order.place(
        user_id="client-001",
        item="Flowers",
        pickup_address="Marché Central",
        delivery_address="Anfa Place",
        total_amount=20.0,
    )
    order._events.clear()
    return order


@given(parsers.cfparse('courier "{courier}" accepted the order'), target_fixture="order")
def accepted_order(order, courier):
    order.accept(courier)
    order._events.clear()
    return order


@given("the owner confirmed delivery", target_fixture="order")
def delivered_order(order):
    order.complete_delivery(rating=5)
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps — Order
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the order courier is "{courier}"'))
def order_courier_is(order, courier):
    assert order.courier_id == courier


@then("the order action fails with a conflict")
def order_action_conflicts(error):
    assert isinstance(error["exc"], Conflict), f"Expected a conflict, got {error['exc']!r}"


@then("the order action fails with a validation error")
def order_action_invalid(error):
    assert isinstance(error["exc"], ValidationError), f"Expected a validation error, got {error['exc']!r}"


@then(parsers.cfparse("an {event_type} order event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"
