"""Domain events for the CourierProfile aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="CourierProfile")
class CourierRegistered:
    """A user applied to deliver orders and a courier profile was opened."""

    __version__ = 1

    courier_profile_id: Identifier(required=True)
    user_id: Identifier(required=True)
    name: String(required=True)
    application_status: String(required=True)
    registered_at: DateTime(required=True)


@marketplace.event(part_of="CourierProfile")
class CourierDetailsUpdated:
    """The courier edited their contact, document or vehicle details."""

    __version__ = 1

    courier_profile_id: Identifier(required=True)
    user_id: Identifier(required=True)
    updated_at: DateTime(required=True)


@marketplace.event(part_of="CourierProfile")
class CourierLocationUpdated:
    """The courier reported a new position."""

    __version__ = 1

    courier_profile_id: Identifier(required=True)
    user_id: Identifier(required=True)
    latitude: Float(required=True)
    longitude: Float(required=True)
    updated_at: DateTime(required=True)


@marketplace.event(part_of="CourierProfile")
class CourierApplicationReviewed:
    """An admin accepted or rejected a courier application."""

    __version__ = 1

    courier_profile_id: Identifier(required=True)
    user_id: Identifier(required=True)
    decision: String(required=True)
    reviewed_by: Identifier()
    reviewed_at: DateTime(required=True)


@marketplace.event(part_of="CourierProfile")
class CourierRated:
    """A client's rating was folded into the courier's running average."""

    __version__ = 1

    courier_profile_id: Identifier(required=True)
    user_id: Identifier(required=True)
    order_id: Identifier()
    rating: Integer(required=True)
    average_rating: Float(required=True)
    rating_count: Integer(required=True)
    rated_at: DateTime(required=True)


@marketplace.event(part_of="CourierProfile")
class CourierDeliveryRecorded:
    """A delivery completed by the courier was counted."""

    __version__ = 1

    courier_profile_id: Identifier(required=True)
    user_id: Identifier(required=True)
    order_id: Identifier(required=True)
    total_deliveries: Integer(required=True)
