"""Order creation — command and handler."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller
from marketplace.domain import marketplace
from marketplace.errors import Conflict
from marketplace.order.order import Order, generate_order_number

logger = structlog.get_logger(__name__)

MAX_ORDER_NUMBER_ATTEMPTS = 5


@marketplace.command(part_of="Order")
class CreateOrder:
    caller_id = Identifier()
    item = String(required=True, max_length=500)
    pickup_address = String(required=True, max_length=500)
    delivery_address = String(required=True, max_length=500)
    pickup_location = Text()  # JSON: {"latitude": ..., "longitude": ...}
    delivery_location = Text()  # JSON: {"latitude": ..., "longitude": ...}
    total_amount = Float(min_value=0.0)
    distance_km = Float(min_value=0.0)


def _order_number_taken(order_number):
    repo = current_domain.repository_for(Order)
    return bool(repo._dao.query.filter(order_number=order_number).limit(1).all().items)


def _unique_order_number():
    for attempt in range(1, MAX_ORDER_NUMBER_ATTEMPTS + 1):
        candidate = generate_order_number()
        if not _order_number_taken(candidate):
            return candidate
        logger.warning("Order number collision, regenerating", order_number=candidate, attempt=attempt)
    raise Conflict("Could not allocate a unique order number")


def _parse_location(raw):
    if not raw:
        return None
    return json.loads(raw) if isinstance(raw, str) else raw


@marketplace.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        user = require_caller(command.caller_id)

        order = Order.place(
            user_id=user.id,
            item=command.item,
            pickup_address=command.pickup_address,
            delivery_address=command.delivery_address,
            pickup_location=_parse_location(command.pickup_location),
            delivery_location=_parse_location(command.delivery_location),
            total_amount=command.total_amount,
            distance_km=command.distance_km,
            order_number=_unique_order_number(),
        )
        current_domain.repository_for(Order).add(order)

        logger.info("Order placed", order_id=str(order.id), order_number=order.order_number, user_id=str(user.id))
        return str(order.id)
