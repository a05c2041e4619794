"""Order aggregate (CQRS) — a single delivery request.

The order moves through a small state machine; every transition is guarded
here and emits the event the notification fanout, rating aggregator and
dashboards react to. Orders are never deleted; terminal states are kept for
history.

State Machine (4 states):
    PENDING → IN_TRANSIT → DELIVERED | CANCELLED
    PENDING → CANCELLED
    DELIVERED, CANCELLED → (terminal)
"""

import secrets
import string
import time
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text, ValueObject

from marketplace.courier.rating import validate_rating
from marketplace.domain import marketplace
from marketplace.errors import Conflict
from marketplace.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
)

DEFAULT_TOTAL_AMOUNT = 5.0

_BASE36 = string.digits + string.ascii_uppercase


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.IN_TRANSIT, OrderStatus.CANCELLED},
    OrderStatus.IN_TRANSIT: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# States that require an assigned courier
_COURIER_STATES = {OrderStatus.IN_TRANSIT, OrderStatus.DELIVERED}


def _to_base36(number):
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_order_number():
    """``ORD-<base36 ms timestamp>-<6 random base36 chars>``, upper-cased."""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"ORD-{timestamp}-{suffix}".upper()


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class GeoPoint:
    """Pickup or delivery coordinates."""

    latitude = Float(required=True, min_value=-90.0, max_value=90.0)
    longitude = Float(required=True, min_value=-180.0, max_value=180.0)


@marketplace.value_object(part_of="Order")
class Rating:
    """The owner's 1-5 rating of the delivery."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None:
            validate_rating(self.score)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    """A client's request to move one item from a pickup to a delivery address."""

    order_number = String(required=True, max_length=50, unique=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)

    # Parties
    user_id = Identifier(required=True)
    courier_id = Identifier()

    # What and where
    item = String(required=True, max_length=500)
    pickup_address = String(required=True, max_length=500)
    delivery_address = String(required=True, max_length=500)
    pickup_location = ValueObject(GeoPoint)
    delivery_location = ValueObject(GeoPoint)
    distance_km = Float(min_value=0.0)

    # Money
    total_amount = Float(required=True, min_value=0.0)
    delivery_fee = Float(required=True, min_value=0.0)

    # Outcome
    rating = ValueObject(Rating)
    review_message = Text()
    cancellation_reason = String(max_length=500)

    # Timestamps
    accepted_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def courier_matches_status(self):
        status = OrderStatus(self.status)
        if status in _COURIER_STATES and not self.courier_id:
            raise ValidationError({"courier_id": [f"An order that is {status.value} must have a courier"]})
        if status == OrderStatus.PENDING and self.courier_id:
            raise ValidationError({"courier_id": ["A pending order cannot have a courier"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        item,
        pickup_address,
        delivery_address,
        pickup_location=None,
        delivery_location=None,
        total_amount=None,
        distance_km=None,
        order_number=None,
    ):
        """Create a pending order. The delivery fee equals the total amount."""
        now = datetime.now(UTC)
        amount = DEFAULT_TOTAL_AMOUNT if total_amount is None else total_amount

        order = cls(
            order_number=order_number or generate_order_number(),
            status=OrderStatus.PENDING.value,
            user_id=user_id,
            item=item,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            pickup_location=GeoPoint(**pickup_location) if pickup_location else None,
            delivery_location=GeoPoint(**delivery_location) if delivery_location else None,
            distance_km=distance_km,
            total_amount=amount,
            delivery_fee=amount,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(user_id),
                item=item,
                pickup_address=pickup_address,
                delivery_address=delivery_address,
                total_amount=order.total_amount,
                delivery_fee=order.delivery_fee,
                distance_km=distance_km,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise Conflict(f"Cannot transition from {current.value} to {target_status.value}")

    def accept(self, courier_id):
        """Assign the courier; only a pending order can be accepted."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise Conflict("Order is no longer available")

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.IN_TRANSIT.value
            self.courier_id = courier_id
            self.accepted_at = now
            self.updated_at = now

        self.raise_(
            OrderAccepted(
                order_id=str(self.id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                courier_id=str(courier_id),
                accepted_at=now,
            )
        )

    def change_status(self, new_status, changed_by=None):
        """Operational correction of the status along the transition graph."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        self._assert_can_transition(target)
        if target in _COURIER_STATES and not self.courier_id:
            raise Conflict(f"Order cannot be {target.value} without an assigned courier")

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        if target == OrderStatus.DELIVERED:
            self.delivered_at = now
        elif target == OrderStatus.CANCELLED:
            self.cancelled_at = now
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                courier_id=str(self.courier_id) if self.courier_id else None,
                previous_status=previous,
                new_status=target.value,
                total_amount=self.total_amount,
                delivery_fee=self.delivery_fee,
                changed_by=str(changed_by) if changed_by else None,
                changed_at=now,
            )
        )

    def cancel(self, reason=None, cancelled_by=None):
        """Cancel a pending or in-transit order. The courier, if any, is kept."""
        current = OrderStatus(self.status)
        if current in (OrderStatus.DELIVERED, OrderStatus.CANCELLED):
            raise Conflict(f"Cannot cancel an order that is {current.value}")

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_at = now
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                courier_id=str(self.courier_id) if self.courier_id else None,
                previous_status=current.value,
                reason=reason,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                cancelled_at=now,
            )
        )

    def complete_delivery(self, rating, review_message=None):
        """The owner confirms delivery of an in-transit order and rates it."""
        if OrderStatus(self.status) != OrderStatus.IN_TRANSIT:
            raise Conflict("Only orders in transit can be marked as delivered")
        validate_rating(rating)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.DELIVERED.value
            self.rating = Rating(score=rating)
            self.review_message = review_message
            self.delivered_at = now
            self.updated_at = now

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                courier_id=str(self.courier_id),
                rating=rating,
                review_message=review_message,
                total_amount=self.total_amount,
                delivery_fee=self.delivery_fee,
                delivered_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Visibility
    # -------------------------------------------------------------------
    def is_visible_to(self, user):
        """Owner, assigned courier and admins; any courier while still pending."""
        if user.is_admin or str(self.user_id) == str(user.id):
            return True
        if self.courier_id and str(self.courier_id) == str(user.id):
            return True
        return user.is_courier and OrderStatus(self.status) == OrderStatus.PENDING
