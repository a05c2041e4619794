"""Order acceptance by a courier — command and handler.

Two couriers racing for the same pending order resolve with one winner: the
loser either sees the order already in transit or loses the version check on
save. Both reach callers of ``dispatch`` as ``Conflict``.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.access.guard import require_role
from marketplace.account.user import UserRole
from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.utils.repository import get_or_raise

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class AcceptOrder:
    caller_id = Identifier()
    order_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class AcceptOrderHandler:
    @handle(AcceptOrder)
    def accept_order(self, command):
        courier = require_role(command.caller_id, UserRole.COURIER.value)
        order = get_or_raise(Order, command.order_id, "Order not found")

        order.accept(courier_id=courier.id)
        current_domain.repository_for(Order).add(order)

        logger.info("Order accepted", order_id=str(order.id), courier_id=str(courier.id))
        return {"success": True}
