"""Application tests for courier applications, profile edits and review."""

import json

import pytest
from marketplace.account.user import User
from marketplace.courier.onboarding import (
    RegisterCourier,
    RemoveCourierProfile,
    ReviewCourierApplication,
    UpdateCourierDetails,
    UpdateCourierLocation,
    find_profile_for_user,
)
from marketplace.courier.profile import CourierProfile
from marketplace.courier.queries import get_courier_profile, get_my_courier_profile, list_courier_applications
from marketplace.errors import Conflict, Forbidden, InvalidRole, NotFound
from marketplace.notification.notification import Notification
from marketplace.storage import get_blob_store
from protean import current_domain


def _apply(caller_id, **overrides):
    payload = {
        "name": "Youssef",
        "phone": "+212600000099",
        "vehicle_type": "motorbike",
        "vehicle_number": "12345-A-6",
        "vehicle_image_refs": json.dumps([]),
    }
    payload.update(overrides)
    return current_domain.process(RegisterCourier(caller_id=caller_id, **payload), asynchronous=False)


def _review(admin_id, profile_id, decision):
    current_domain.process(
        ReviewCourierApplication(caller_id=admin_id, courier_profile_id=profile_id, decision=decision),
        asynchronous=False,
    )


class TestRegisterCourier:
    def test_client_applies(self, client_id):
        profile_id = _apply(client_id)
        profile = current_domain.repository_for(CourierProfile).get(profile_id)
        assert str(profile.user_id) == client_id
        assert profile.application_status == "pending"
        assert current_domain.repository_for(User).get(client_id).role == "courier"

    def test_only_one_profile_per_user(self, client_id):
        _apply(client_id)
        with pytest.raises(Conflict):
            _apply(client_id)

    def test_vehicle_images_resolved_to_urls(self, client_id):
        store = get_blob_store()
        refs = [store.put(b"front", "image/jpeg").ref, store.put(b"back", "image/jpeg").ref]
        _apply(client_id, vehicle_image_refs=json.dumps(refs))

        view = get_my_courier_profile(client_id)
        assert view["vehicle_image_urls"] == [f"/uploads/{ref}" for ref in refs]


class TestCourierProfilePersistence:
    def test_image_refs_survive_repeated_saves(self, client_id):
        store = get_blob_store()
        refs = [store.put(b"plate", "image/jpeg").ref]
        profile_id = _apply(client_id, vehicle_image_refs=json.dumps(refs))

        repo = current_domain.repository_for(CourierProfile)
        profile = repo.get(profile_id)
        assert profile.vehicle.image_refs == json.dumps(refs)

        profile.update_location(33.57, -7.59)
        repo.add(profile)

        reloaded = repo.get(profile_id)
        assert reloaded.vehicle.image_refs == json.dumps(refs)
        assert reloaded.image_ref_list == refs
        assert reloaded.current_location.latitude == 33.57

    def test_profile_without_images_reloads(self, client_id):
        profile_id = _apply(client_id, vehicle_image_refs=None)
        repo = current_domain.repository_for(CourierProfile)
        repo.add(repo.get(profile_id))

        assert repo.get(profile_id).image_ref_list == []


class TestUpdateCourier:
    def test_update_details(self, courier_id):
        current_domain.process(
            UpdateCourierDetails(caller_id=courier_id, address="Hay Riad, Rabat"),
            asynchronous=False,
        )
        assert find_profile_for_user(courier_id).address == "Hay Riad, Rabat"

    def test_update_location(self, courier_id):
        current_domain.process(
            UpdateCourierLocation(caller_id=courier_id, latitude=34.02, longitude=-6.84),
            asynchronous=False,
        )
        location = get_my_courier_profile(courier_id)["current_location"]
        assert location == {"latitude": 34.02, "longitude": -6.84}

    def test_client_has_no_courier_profile(self, client_id):
        with pytest.raises(InvalidRole):
            get_my_courier_profile(client_id)


class TestReviewApplication:
    def test_accept_verifies_and_notifies(self, admin_id, client_id):
        profile_id = _apply(client_id)
        _review(admin_id, profile_id, "accepted")

        assert current_domain.repository_for(User).get(client_id).is_verified is True
        notes = current_domain.repository_for(Notification)._dao.query.filter(user_id=client_id).all().items
        assert [n.notification_type for n in notes] == ["courier_accepted"]
        assert str(notes[0].courier_id) == profile_id

    def test_reject_then_reapply(self, admin_id, client_id):
        profile_id = _apply(client_id)
        _review(admin_id, profile_id, "rejected")
        assert current_domain.repository_for(User).get(client_id).is_verified is False

        current_domain.process(
            UpdateCourierDetails(caller_id=client_id, vehicle_number="777-B-2"),
            asynchronous=False,
        )
        assert find_profile_for_user(client_id).application_status == "pending"

    def test_accepted_cannot_be_reviewed_again(self, admin_id, client_id):
        profile_id = _apply(client_id)
        _review(admin_id, profile_id, "accepted")
        with pytest.raises(Conflict):
            _review(admin_id, profile_id, "rejected")

    def test_non_admin_cannot_review(self, client_id, courier_id):
        profile_id = _apply(client_id)
        with pytest.raises(InvalidRole):
            _review(courier_id, profile_id, "accepted")

    def test_review_queue(self, admin_id, make_user):
        first, second = make_user("client"), make_user("client")
        first_profile = _apply(first)
        second_profile = _apply(second)
        _review(admin_id, second_profile, "accepted")

        pending = list_courier_applications(admin_id)
        assert [view["id"] for view in pending] == [first_profile]


class TestCourierProfileVisibility:
    def test_admin_can_view(self, admin_id, courier_id):
        profile = find_profile_for_user(courier_id)
        assert get_courier_profile(admin_id, profile.id)["user_id"] == courier_id

    def test_other_user_forbidden(self, client_id, courier_id):
        profile = find_profile_for_user(courier_id)
        with pytest.raises(Forbidden):
            get_courier_profile(client_id, profile.id)

    def test_missing(self, admin_id):
        with pytest.raises(NotFound):
            get_courier_profile(admin_id, "missing")


class TestRemoveCourierProfile:
    def _remove(self, caller_id, profile_id):
        return current_domain.process(
            RemoveCourierProfile(caller_id=caller_id, courier_profile_id=profile_id),
            asynchronous=False,
        )

    def test_admin_removes_profile(self, admin_id, courier_id):
        profile = find_profile_for_user(courier_id)
        assert self._remove(admin_id, profile.id) == {"success": True}

        assert find_profile_for_user(courier_id) is None
        assert current_domain.repository_for(User).get(courier_id).role == "courier"

    def test_courier_can_apply_again(self, admin_id, courier_id):
        self._remove(admin_id, find_profile_for_user(courier_id).id)
        profile_id = _apply(courier_id)
        assert str(find_profile_for_user(courier_id).id) == profile_id

    def test_non_admin_rejected(self, courier_id):
        profile = find_profile_for_user(courier_id)
        with pytest.raises(InvalidRole):
            self._remove(courier_id, profile.id)
        assert find_profile_for_user(courier_id) is not None

    def test_unknown_profile(self, admin_id):
        with pytest.raises(NotFound, match="Courier not found"):
            self._remove(admin_id, "missing")
