"""Notifications react to Order events.

OrderPlaced broadcasts the offer to couriers and confirms to the owner;
OrderAccepted tells the owner and withdraws the offer from the other
couriers; cancellations sweep the order's notifications and tell the
courier; OrderDelivered tells both parties.
"""

import structlog
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notification.fanout import fanout_to_eligible_couriers, notify_from_template, prune_by_order
from marketplace.notification.notification import Notification, NotificationType
from marketplace.notification.templates import render
from marketplace.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderStatusChanged,
)

logger = structlog.get_logger(__name__)


def _order_url(order_id):
    return f"/orders/{order_id}"


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::order")
class OrderNotificationHandler:
    """Creates and prunes inbox entries as orders move through their lifecycle."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        context = {
            "order_id": str(event.order_id),
            "order_number": event.order_number,
            "item": event.item,
            "pickup_address": event.pickup_address,
            "delivery_address": event.delivery_address,
        }
        offer = render(NotificationType.ORDER_AVAILABLE.value, context)
        fanout_to_eligible_couriers(
            NotificationType.ORDER_AVAILABLE.value,
            offer["title"],
            offer["message"],
            action_url=_order_url(event.order_id),
            order_id=event.order_id,
        )
        notify_from_template(
            event.user_id,
            NotificationType.ORDER_PLACED.value,
            context,
            action_url=_order_url(event.order_id),
            order_id=event.order_id,
        )

    @handle(OrderAccepted)
    def on_order_accepted(self, event: OrderAccepted) -> None:
        notify_from_template(
            event.user_id,
            NotificationType.ORDER_ASSIGNED.value,
            {"order_id": str(event.order_id), "order_number": event.order_number},
            action_url=_order_url(event.order_id),
            order_id=event.order_id,
            courier_id=event.courier_id,
        )
        removed = prune_by_order(
            event.order_id,
            except_user_id=event.courier_id,
            notification_type=NotificationType.ORDER_AVAILABLE.value,
        )
        logger.info("Withdrew order offers", order_id=str(event.order_id), removed=removed)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        self._sweep_cancelled(event.order_id, event.order_number, event.courier_id, event.reason)

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        """Admin corrections to cancelled or delivered mirror the normal flow."""
        if event.new_status == "cancelled":
            self._sweep_cancelled(event.order_id, event.order_number, event.courier_id, None)
        elif event.new_status == "delivered":
            notify_from_template(
                event.user_id,
                NotificationType.ORDER_COMPLETED.value,
                {"order_id": str(event.order_id), "order_number": event.order_number},
                action_url=_order_url(event.order_id),
                order_id=event.order_id,
                courier_id=event.courier_id,
            )

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        context = {
            "order_id": str(event.order_id),
            "order_number": event.order_number,
            "rating": event.rating,
            "review_message": event.review_message,
        }
        notify_from_template(
            event.courier_id,
            NotificationType.DELIVERY_RATED.value,
            context,
            action_url=_order_url(event.order_id),
            order_id=event.order_id,
            rating=event.rating,
        )
        notify_from_template(
            event.user_id,
            NotificationType.ORDER_COMPLETED.value,
            context,
            action_url=_order_url(event.order_id),
            order_id=event.order_id,
            courier_id=event.courier_id,
        )

    @staticmethod
    def _sweep_cancelled(order_id, order_number, courier_id, reason):
        removed = prune_by_order(order_id)
        logger.info("Pruned notifications for cancelled order", order_id=str(order_id), removed=removed)

        if courier_id:
            notify_from_template(
                courier_id,
                NotificationType.ORDER_CANCELLED.value,
                {"order_id": str(order_id), "order_number": order_number, "reason": reason},
                order_id=order_id,
            )
