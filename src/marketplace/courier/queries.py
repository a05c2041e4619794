"""Read functions over courier profiles."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_owner_or_admin, require_role
from marketplace.account.user import UserRole
from marketplace.courier.onboarding import require_own_profile
from marketplace.courier.profile import ApplicationStatus, CourierProfile
from marketplace.storage import get_blob_store
from marketplace.utils.repository import bounded_limit, get_or_raise

APPLICATIONS_LIMIT = 50


def profile_view(profile: CourierProfile) -> dict:
    """Profile fields with every blob reference resolved to a URL."""
    store = get_blob_store()
    location = profile.current_location
    return {
        "id": str(profile.id),
        "user_id": str(profile.user_id),
        "name": profile.name,
        "phone": profile.phone,
        "address": profile.address,
        "national_id_code": profile.national_id_code,
        "national_id_url": store.url_for(profile.national_id_ref),
        "avatar_url": store.url_for(profile.avatar_ref),
        "vehicle_type": profile.vehicle.vehicle_type if profile.vehicle else None,
        "vehicle_number": profile.vehicle.vehicle_number if profile.vehicle else None,
        "vehicle_image_urls": [url for url in map(store.url_for, profile.image_ref_list) if url],
        "application_status": profile.application_status,
        "rating": profile.rating,
        "rating_count": profile.rating_count,
        "total_deliveries": profile.total_deliveries,
        "current_location": (
            {"latitude": location.latitude, "longitude": location.longitude} if location else None
        ),
    }


def get_my_courier_profile(caller_id) -> dict:
    courier = require_role(caller_id, UserRole.COURIER.value)
    return profile_view(require_own_profile(courier))


def get_courier_profile(caller_id, courier_profile_id) -> dict:
    """The courier themselves or an admin."""
    user = require_caller(caller_id)
    profile = get_or_raise(CourierProfile, courier_profile_id, "Courier profile not found")
    require_owner_or_admin(user, profile.user_id, "Not authorized to view this courier profile")
    return profile_view(profile)


def list_courier_applications(caller_id, status=ApplicationStatus.PENDING.value, limit=None) -> list[dict]:
    """Admin review queue, oldest application first."""
    require_role(caller_id, UserRole.ADMIN.value)
    query = current_domain.repository_for(CourierProfile)._dao.query
    if status:
        if status not in {s.value for s in ApplicationStatus}:
            raise ValidationError({"status": [f"Unknown application status: {status}"]})
        query = query.filter(application_status=status)
    profiles = query.order_by("created_at").limit(bounded_limit(limit, APPLICATIONS_LIMIT)).all().items
    return [profile_view(profile) for profile in profiles]
