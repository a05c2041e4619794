"""Order cancellation — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_owner_or_admin
from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.utils.repository import get_or_raise


@marketplace.command(part_of="Order")
class CancelOrder:
    caller_id = Identifier()
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        user = require_caller(command.caller_id)
        order = get_or_raise(Order, command.order_id, "Order not found")
        require_owner_or_admin(user, order.user_id, "Not authorized to cancel this order")

        order.cancel(reason=command.reason, cancelled_by=user.id)
        current_domain.repository_for(Order).add(order)
        return {"success": True}
