"""Courier onboarding — application, detail edits, location and admin review, removal."""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_role
from marketplace.account.user import User, UserRole
from marketplace.courier.profile import ApplicationStatus, CourierProfile
from marketplace.domain import marketplace
from marketplace.errors import Conflict, NotFound
from marketplace.utils.repository import get_or_raise

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="CourierProfile")
class RegisterCourier:
    """The caller applies to become a courier."""

    caller_id: Identifier()
    name: String(required=True, max_length=200)
    phone: String(required=True, max_length=30)
    address: String(max_length=500)
    national_id_code: String(max_length=50)
    national_id_ref: String(max_length=255)
    avatar_ref: String(max_length=255)
    vehicle_type: String(max_length=50)
    vehicle_number: String(max_length=50)
    vehicle_image_refs: Text()  # JSON: list of blob references


@marketplace.command(part_of="CourierProfile")
class UpdateCourierDetails:
    caller_id: Identifier()
    name: String(max_length=200)
    phone: String(max_length=30)
    address: String(max_length=500)
    national_id_code: String(max_length=50)
    national_id_ref: String(max_length=255)
    avatar_ref: String(max_length=255)
    vehicle_type: String(max_length=50)
    vehicle_number: String(max_length=50)
    vehicle_image_refs: Text()  # JSON: list of blob references


@marketplace.command(part_of="CourierProfile")
class UpdateCourierLocation:
    caller_id: Identifier()
    latitude: Float(required=True, min_value=-90.0, max_value=90.0)
    longitude: Float(required=True, min_value=-180.0, max_value=180.0)


@marketplace.command(part_of="CourierProfile")
class ReviewCourierApplication:
    caller_id: Identifier()
    courier_profile_id: Identifier(required=True)
    decision: String(required=True, choices=ApplicationStatus)


@marketplace.command(part_of="CourierProfile")
class RemoveCourierProfile:
    """An admin deletes a courier profile. The user record and its role stay."""

    caller_id: Identifier()
    courier_profile_id: Identifier(required=True)


def find_profile_for_user(user_id) -> CourierProfile | None:
    profiles = (
        current_domain.repository_for(CourierProfile)._dao.query.filter(user_id=str(user_id)).all().items
    )
    return profiles[0] if profiles else None


def require_own_profile(user: User) -> CourierProfile:
    profile = find_profile_for_user(user.id)
    if profile is None:
        raise NotFound("Courier profile not found")
    return profile


@marketplace.command_handler(part_of=CourierProfile)
class CourierOnboardingHandler:
    @handle(RegisterCourier)
    def register_courier(self, command):
        user = require_caller(command.caller_id)
        if find_profile_for_user(user.id) is not None:
            raise Conflict("Courier profile already exists")

        profile = CourierProfile.register(
            user_id=user.id,
            name=command.name,
            phone=command.phone,
            address=command.address,
            national_id_code=command.national_id_code,
            national_id_ref=command.national_id_ref,
            avatar_ref=command.avatar_ref,
            vehicle_type=command.vehicle_type,
            vehicle_number=command.vehicle_number,
            vehicle_image_refs=json.loads(command.vehicle_image_refs) if command.vehicle_image_refs else None,
        )
        current_domain.repository_for(CourierProfile).add(profile)

        user.change_role(UserRole.COURIER.value, changed_by=user.id)
        current_domain.repository_for(User).add(user)

        logger.info("Courier application submitted", user_id=str(user.id), courier_profile_id=str(profile.id))
        return str(profile.id)

    @handle(UpdateCourierDetails)
    def update_courier_details(self, command):
        user = require_role(command.caller_id, UserRole.COURIER.value)
        profile = require_own_profile(user)

        changes = {
            field_name: getattr(command, field_name)
            for field_name in (
                "name",
                "phone",
                "address",
                "national_id_code",
                "national_id_ref",
                "avatar_ref",
                "vehicle_type",
                "vehicle_number",
                "vehicle_image_refs",
            )
            if getattr(command, field_name)
        }
        if "vehicle_image_refs" in changes:
            changes["vehicle_image_refs"] = json.loads(changes["vehicle_image_refs"])
        profile.update_details(**changes)
        current_domain.repository_for(CourierProfile).add(profile)

    @handle(UpdateCourierLocation)
    def update_courier_location(self, command):
        user = require_role(command.caller_id, UserRole.COURIER.value)
        profile = require_own_profile(user)
        profile.update_location(command.latitude, command.longitude)
        current_domain.repository_for(CourierProfile).add(profile)

    @handle(ReviewCourierApplication)
    def review_courier_application(self, command):
        admin = require_role(command.caller_id, UserRole.ADMIN.value)
        profile = get_or_raise(CourierProfile, command.courier_profile_id, "Courier profile not found")
        profile.review(command.decision, reviewed_by=admin.id)
        current_domain.repository_for(CourierProfile).add(profile)

    @handle(RemoveCourierProfile)
    def remove_courier_profile(self, command):
        admin = require_role(command.caller_id, UserRole.ADMIN.value)
        profile = get_or_raise(CourierProfile, command.courier_profile_id, "Courier not found")
        current_domain.repository_for(CourierProfile)._dao.delete(profile)
        logger.info(
            "Courier profile removed",
            courier_profile_id=str(profile.id),
            user_id=str(profile.user_id),
            removed_by=str(admin.id),
        )
        return {"success": True}


def ensure_profile_for_user(user_id) -> CourierProfile:
    """Return the courier's profile, opening a pending one if it is missing."""
    profile = find_profile_for_user(user_id)
    if profile is not None:
        return profile

    user = get_or_raise(User, user_id, "User not found")
    profile = CourierProfile.register(user_id=user.id, name=user.name, phone=user.phone)
    current_domain.repository_for(CourierProfile).add(profile)
    logger.info("Opened courier profile on demand", user_id=str(user.id), courier_profile_id=str(profile.id))
    return profile
