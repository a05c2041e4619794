"""Tests for the Notification aggregate and its typed metadata."""

import pytest
from marketplace.notification.events import NotificationCreated, NotificationRead
from marketplace.notification.notification import Notification, NotificationType, metadata_errors
from protean.exceptions import ValidationError


def _notification(notification_type="order_available", **metadata):
    if notification_type == "order_available" and not metadata:
        metadata = {"order_id": "ord-001"}
    return Notification.create(
        user_id="user-001",
        notification_type=notification_type,
        title="Title",
        message="Message",
        **metadata,
    )


class TestMetadataUnion:
    def test_order_available_needs_order_id(self):
        assert metadata_errors("order_available", {}) == ["order_available requires order_id"]

    def test_payment_received_needs_transaction_and_amount(self):
        errors = metadata_errors("payment_received", {"amount": 50.0})
        assert errors == ["payment_received requires transaction_id"]

    def test_rejects_field_not_permitted_for_type(self):
        errors = metadata_errors("order_placed", {"order_id": "ord-001", "amount": 10.0})
        assert errors == ["order_placed does not accept amount"]

    def test_none_values_count_as_absent(self):
        assert metadata_errors("order_completed", {"order_id": "ord-001", "courier_id": None}) == []

    def test_general_carries_no_metadata(self):
        assert metadata_errors("general", {}) == []
        assert metadata_errors("general", {"order_id": "ord-001"})

    def test_unknown_type(self):
        assert metadata_errors("carrier_pigeon", {}) == ["Unknown notification type: carrier_pigeon"]


class TestCreateNotification:
    def test_created_unread(self):
        notification = _notification()
        assert notification.read is False
        assert notification.read_at is None
        assert notification.order_id == "ord-001"
        assert notification.created_at is not None

    def test_raises_created_event(self):
        notification = _notification()
        event = notification._events[-1]
        assert isinstance(event, NotificationCreated)
        assert event.notification_type == "order_available"
        assert event.order_id == "ord-001"

    def test_missing_required_metadata_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Notification.create(
                user_id="user-001",
                notification_type=NotificationType.DELIVERY_RATED.value,
                title="Rated",
                message="You were rated",
                order_id="ord-001",
            )
        assert "metadata" in exc_info.value.messages

    def test_unknown_metadata_key_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            _notification(order_id="ord-001", pickup_address="Somewhere")
        assert exc_info.value.messages["metadata"] == ["Unknown metadata field: pickup_address"]

    def test_attached_metadata(self):
        notification = _notification("payment_received", transaction_id="txn-001", amount=50.0)
        assert notification.attached_metadata == {
            "order_id": None,
            "courier_id": None,
            "amount": 50.0,
            "transaction_id": "txn-001",
            "rating": None,
        }


class TestMarkRead:
    def test_mark_read(self):
        notification = _notification()
        notification.mark_read()
        assert notification.read is True
        assert notification.read_at is not None
        assert isinstance(notification._events[-1], NotificationRead)

    def test_mark_read_is_idempotent(self):
        notification = _notification()
        notification.mark_read()
        first_read_at = notification.read_at
        notification._events.clear()

        notification.mark_read()
        assert notification.read_at == first_read_at
        assert notification._events == []
