"""Delivery confirmation and rating by the order owner — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller
from marketplace.courier.rating import validate_rating
from marketplace.domain import marketplace
from marketplace.errors import Forbidden
from marketplace.order.order import Order
from marketplace.utils.repository import get_or_raise


@marketplace.command(part_of="Order")
class CompleteDelivery:
    """The owner marks an in-transit order delivered and rates the courier."""

    caller_id = Identifier()
    order_id = Identifier(required=True)
    rating = Integer(required=True)
    review_message = Text()


@marketplace.command_handler(part_of=Order)
class CompleteDeliveryHandler:
    @handle(CompleteDelivery)
    def complete_delivery(self, command):
        user = require_caller(command.caller_id)
        validate_rating(command.rating)
        order = get_or_raise(Order, command.order_id, "Order not found")
        if str(order.user_id) != str(user.id):
            raise Forbidden("Only the order owner can confirm delivery")

        order.complete_delivery(rating=command.rating, review_message=command.review_message)
        current_domain.repository_for(Order).add(order)
        return {"success": True}
