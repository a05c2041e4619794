"""Admin status correction — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.access.guard import require_role
from marketplace.account.user import UserRole
from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.utils.repository import get_or_raise


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    """Move an order along the transition graph outside the normal flow."""

    caller_id = Identifier()
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@marketplace.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        admin = require_role(command.caller_id, UserRole.ADMIN.value)
        order = get_or_raise(Order, command.order_id, "Order not found")

        order.change_status(command.status, changed_by=admin.id)
        current_domain.repository_for(Order).add(order)
        return {"success": True}
