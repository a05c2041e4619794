"""Courier profiles react to Order events — rating aggregation and delivery counts."""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.courier.onboarding import ensure_profile_for_user
from marketplace.courier.profile import CourierProfile
from marketplace.domain import marketplace
from marketplace.order.events import OrderDelivered, OrderStatusChanged

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=CourierProfile, stream_category="marketplace::order")
class CourierOrderEventHandler:
    """Keeps the courier's rating and delivery count in step with completed orders."""

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        """Fold the owner's rating into the courier's average and count the delivery."""
        profile = ensure_profile_for_user(event.courier_id)
        profile.apply_rating(event.rating, order_id=event.order_id)
        profile.record_delivery(event.order_id)
        current_domain.repository_for(CourierProfile).add(profile)

        logger.info(
            "Courier rated for delivery",
            courier_id=str(event.courier_id),
            order_id=str(event.order_id),
            rating=event.rating,
            average_rating=profile.rating,
            rating_count=profile.rating_count,
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        """An admin correction to delivered counts the delivery, without a rating."""
        if event.new_status != "delivered" or not event.courier_id:
            return

        profile = ensure_profile_for_user(event.courier_id)
        profile.record_delivery(event.order_id)
        current_domain.repository_for(CourierProfile).add(profile)
