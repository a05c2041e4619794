"""CourierProfile aggregate — the courier-only extension of a User.

Holds vehicle and identity-document references, the admin's review of the
courier application, the live location, and the reputation figures that the
rating aggregator maintains.

State Machine (application):
    PENDING → ACCEPTED | REJECTED
    REJECTED → PENDING (re-apply after editing details)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text, ValueObject

from marketplace.courier.events import (
    CourierApplicationReviewed,
    CourierDeliveryRecorded,
    CourierDetailsUpdated,
    CourierLocationUpdated,
    CourierRated,
    CourierRegistered,
)
from marketplace.courier.rating import MAX_RATING, aggregate_rating, validate_rating
from marketplace.domain import marketplace
from marketplace.errors import Conflict

_UNSET = object()


class ApplicationStatus(Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


_VALID_TRANSITIONS = {
    ApplicationStatus.PENDING: {ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED},
    ApplicationStatus.ACCEPTED: set(),
    ApplicationStatus.REJECTED: {ApplicationStatus.PENDING},
}


@marketplace.value_object(part_of="CourierProfile")
class Location:
    """A latitude/longitude pair reported by the courier's device."""

    latitude: Float(required=True, min_value=-90.0, max_value=90.0)
    longitude: Float(required=True, min_value=-180.0, max_value=180.0)


@marketplace.value_object(part_of="CourierProfile")
class Vehicle:
    vehicle_type: String(max_length=50)
    vehicle_number: String(max_length=50)
    image_refs: Text()  # JSON array of blob references


@marketplace.aggregate
class CourierProfile:
    """A courier's operational profile, one per courier user."""

    user_id: Identifier(required=True, unique=True)
    name: String(required=True, max_length=200)
    phone: String(max_length=30)
    address: String(max_length=500)
    national_id_code: String(max_length=50)
    national_id_ref: String(max_length=255)
    avatar_ref: String(max_length=255)
    vehicle: ValueObject(Vehicle)
    application_status: String(choices=ApplicationStatus, default=ApplicationStatus.PENDING.value)
    rating: Float()
    rating_count: Integer(default=0)
    total_deliveries: Integer(default=0)
    current_location: ValueObject(Location)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is not None and (self.rating < 0 or self.rating > MAX_RATING):
            raise ValidationError({"rating": [f"Rating must be between 0 and {MAX_RATING}"]})

    @invariant.post
    def counters_cannot_be_negative(self):
        if (self.rating_count or 0) < 0 or (self.total_deliveries or 0) < 0:
            raise ValidationError({"rating_count": ["Courier counters cannot be negative"]})

    @classmethod
    def register(
        cls,
        user_id,
        name,
        phone=None,
        address=None,
        national_id_code=None,
        national_id_ref=None,
        avatar_ref=None,
        vehicle_type=None,
        vehicle_number=None,
        vehicle_image_refs=None,
    ):
        now = datetime.now(UTC)
        profile = cls(
            user_id=user_id,
            name=name,
            phone=phone,
            address=address,
            national_id_code=national_id_code,
            national_id_ref=national_id_ref,
            avatar_ref=avatar_ref,
            vehicle=Vehicle(
                vehicle_type=vehicle_type,
                vehicle_number=vehicle_number,
                image_refs=json.dumps(vehicle_image_refs or []),
            ),
            application_status=ApplicationStatus.PENDING.value,
            rating=None,
            rating_count=0,
            total_deliveries=0,
            created_at=now,
            updated_at=now,
        )
        profile.raise_(
            CourierRegistered(
                courier_profile_id=str(profile.id),
                user_id=str(user_id),
                name=name,
                application_status=profile.application_status,
                registered_at=now,
            )
        )
        return profile

    @property
    def image_ref_list(self):
        if self.vehicle is None or not self.vehicle.image_refs:
            return []
        return json.loads(self.vehicle.image_refs)

    def update_details(
        self,
        name=_UNSET,
        phone=_UNSET,
        address=_UNSET,
        national_id_code=_UNSET,
        national_id_ref=_UNSET,
        avatar_ref=_UNSET,
        vehicle_type=_UNSET,
        vehicle_number=_UNSET,
        vehicle_image_refs=_UNSET,
    ):
        """Edit the courier's own details. A rejected application goes back to review."""
        for field_name, value in (
            ("name", name),
            ("phone", phone),
            ("address", address),
            ("national_id_code", national_id_code),
            ("national_id_ref", national_id_ref),
            ("avatar_ref", avatar_ref),
        ):
            if value is not _UNSET:
                setattr(self, field_name, value)

        current = self.vehicle
        self.vehicle = Vehicle(
            vehicle_type=vehicle_type if vehicle_type is not _UNSET else (current.vehicle_type if current else None),
            vehicle_number=(
                vehicle_number if vehicle_number is not _UNSET else (current.vehicle_number if current else None)
            ),
            image_refs=(
                json.dumps(vehicle_image_refs or [])
                if vehicle_image_refs is not _UNSET
                else (current.image_refs if current else json.dumps([]))
            ),
        )

        if ApplicationStatus(self.application_status) == ApplicationStatus.REJECTED:
            self.application_status = ApplicationStatus.PENDING.value

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CourierDetailsUpdated(
                courier_profile_id=str(self.id),
                user_id=str(self.user_id),
                updated_at=now,
            )
        )

    def update_location(self, latitude, longitude):
        now = datetime.now(UTC)
        self.current_location = Location(latitude=latitude, longitude=longitude)
        self.updated_at = now
        self.raise_(
            CourierLocationUpdated(
                courier_profile_id=str(self.id),
                user_id=str(self.user_id),
                latitude=latitude,
                longitude=longitude,
                updated_at=now,
            )
        )

    def review(self, decision, reviewed_by=None):
        """Record the admin's decision on the courier application."""
        target = ApplicationStatus(decision)
        current = ApplicationStatus(self.application_status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise Conflict(f"Cannot transition application from {current.value} to {target.value}")

        now = datetime.now(UTC)
        self.application_status = target.value
        self.updated_at = now
        self.raise_(
            CourierApplicationReviewed(
                courier_profile_id=str(self.id),
                user_id=str(self.user_id),
                decision=target.value,
                reviewed_by=str(reviewed_by) if reviewed_by else None,
                reviewed_at=now,
            )
        )

    def apply_rating(self, new_rating, order_id=None):
        """Fold a client's rating into the running average."""
        validate_rating(new_rating)

        updated_rating, updated_count = aggregate_rating(self.rating, self.rating_count, new_rating)

        now = datetime.now(UTC)
        self.rating = updated_rating
        self.rating_count = updated_count
        self.updated_at = now

        self.raise_(
            CourierRated(
                courier_profile_id=str(self.id),
                user_id=str(self.user_id),
                order_id=str(order_id) if order_id else None,
                rating=new_rating,
                average_rating=updated_rating,
                rating_count=updated_count,
                rated_at=now,
            )
        )

    def record_delivery(self, order_id):
        self.total_deliveries = (self.total_deliveries or 0) + 1
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CourierDeliveryRecorded(
                courier_profile_id=str(self.id),
                user_id=str(self.user_id),
                order_id=str(order_id),
                total_deliveries=self.total_deliveries,
            )
        )
