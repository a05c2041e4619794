"""Notification templates — title and message text per notification type.

Each renderer takes the event context and returns ``{"title", "message"}``.
Amounts are shown in dirhams, the marketplace's single currency.
"""

from marketplace.notification.notification import NotificationType

CURRENCY = "DH"


def _order_ref(context):
    return context.get("order_number") or context.get("order_id", "N/A")


def _order_available(context):
    return {
        "title": "New Delivery Available",
        "message": (
            f"Order {_order_ref(context)}: {context.get('item', 'an item')} from "
            f"{context.get('pickup_address', 'pickup')} to {context.get('delivery_address', 'destination')}."
        ),
    }


def _order_placed(context):
    return {
        "title": "Order Placed",
        "message": f"Your order {_order_ref(context)} has been placed. We'll let you know when a courier accepts it.",
    }


def _order_assigned(context):
    return {
        "title": "Courier Assigned",
        "message": f"A courier has accepted your order {_order_ref(context)} and is on the way.",
    }


def _order_completed(context):
    return {
        "title": "Order Delivered",
        "message": f"Your order {_order_ref(context)} has been delivered. Thank you for using our service.",
    }


def _delivery_rated(context):
    message = f"You received a {context.get('rating')}-star rating for order {_order_ref(context)}."
    if context.get("review_message"):
        message += f' Review: "{context["review_message"]}"'
    return {"title": "Delivery Completed", "message": message}


def _order_cancelled(context):
    message = f"Order {_order_ref(context)} has been cancelled."
    if context.get("reason"):
        message += f" Reason: {context['reason']}"
    return {"title": "Order Cancelled", "message": message}


def _payment_received(context):
    return {
        "title": "Deposit Approved",
        "message": (
            f"Your deposit of {context.get('amount')} {CURRENCY} has been approved and added to your wallet."
        ),
    }


def _deposit_rejected(context):
    message = f"Your deposit of {context.get('amount')} {CURRENCY} has been rejected."
    if context.get("reason"):
        message += f" Reason: {context['reason']}"
    else:
        message += " Please contact support for more information."
    return {"title": "Deposit Rejected", "message": message}


def _courier_accepted(context):
    return {
        "title": "Application Approved",
        "message": "Your courier application has been approved. You can now accept delivery orders.",
    }


def _courier_rejected(context):
    return {
        "title": "Application Rejected",
        "message": "Your courier application was not approved. Update your details to apply again.",
    }


TEMPLATE_REGISTRY = {
    NotificationType.ORDER_AVAILABLE.value: _order_available,
    NotificationType.ORDER_PLACED.value: _order_placed,
    NotificationType.ORDER_ASSIGNED.value: _order_assigned,
    NotificationType.ORDER_COMPLETED.value: _order_completed,
    NotificationType.DELIVERY_RATED.value: _delivery_rated,
    NotificationType.ORDER_CANCELLED.value: _order_cancelled,
    NotificationType.PAYMENT_RECEIVED.value: _payment_received,
    NotificationType.DEPOSIT_REJECTED.value: _deposit_rejected,
    NotificationType.COURIER_ACCEPTED.value: _courier_accepted,
    NotificationType.COURIER_REJECTED.value: _courier_rejected,
}


def render(notification_type: str, context: dict) -> dict:
    """Render the title and message for a notification type."""
    renderer = TEMPLATE_REGISTRY.get(notification_type)
    if renderer is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return renderer(context)
