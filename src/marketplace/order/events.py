"""Domain events for the Order aggregate.

Events carry the owner and courier ids so that notification fanout, rating
aggregation and the dashboards can react without reloading the order.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A client requested a delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    item = String(required=True)
    pickup_address = String(required=True)
    delivery_address = String(required=True)
    total_amount = Float(required=True)
    delivery_fee = Float(required=True)
    distance_km = Float()
    created_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderAccepted:
    """A courier took a pending order; it is now in transit."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    courier_id = Identifier(required=True)
    accepted_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """An admin corrected the order's status directly."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    courier_id = Identifier()
    previous_status = String(required=True)
    new_status = String(required=True)
    total_amount = Float()
    delivery_fee = Float()
    changed_by = Identifier()
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """The owner or an admin cancelled the order before delivery."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    courier_id = Identifier()
    previous_status = String(required=True)
    reason = String()
    cancelled_by = Identifier()
    cancelled_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDelivered:
    """The owner confirmed delivery and rated the courier."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    courier_id = Identifier(required=True)
    rating = Integer(required=True)
    review_message = Text()
    total_amount = Float(required=True)
    delivery_fee = Float(required=True)
    delivered_at = DateTime(required=True)
