"""Application tests for the notification inbox and fanout helpers."""

import pytest
from marketplace.errors import Forbidden, NotFound
from marketplace.notification.fanout import eligible_courier_ids, notify, prune_by_order
from marketplace.notification.notification import Notification
from marketplace.notification.queries import get_notifications, get_unread_count
from marketplace.notification.reading import DeleteNotification, MarkAllNotificationsRead, MarkNotificationRead
from protean import current_domain


def _general(user_id, n=1):
    return [notify(user_id, "general", f"Notice {i}", "Hello") for i in range(n)]


class TestFanoutHelpers:
    def test_eligible_couriers_exclude_disabled_and_other_roles(self, make_user, client_id):
        enabled = make_user("courier")
        make_user("courier", enabled=False)
        make_user("admin")
        assert eligible_courier_ids() == [enabled]

    def test_prune_by_order_spares_one_recipient(self, client_id, courier_id):
        notify(client_id, "order_placed", "t", "m", order_id="ord-1")
        notify(courier_id, "order_available", "t", "m", order_id="ord-1")
        notify(courier_id, "order_available", "t", "m", order_id="ord-2")

        assert prune_by_order("ord-1", except_user_id=courier_id) == 1
        remaining = current_domain.repository_for(Notification)._dao.query.all().items
        assert sorted(n.order_id for n in remaining) == ["ord-1", "ord-2"]

    def test_prune_by_type(self, client_id, courier_id):
        notify(client_id, "order_placed", "t", "m", order_id="ord-1")
        notify(courier_id, "order_available", "t", "m", order_id="ord-1")
        assert prune_by_order("ord-1", notification_type="order_available") == 1
        assert get_unread_count(client_id) == 1


class TestReadInbox:
    def test_newest_first(self, client_id):
        ids = _general(client_id, 3)
        inbox = get_notifications(client_id)
        assert {str(n.id) for n in inbox} == set(ids)
        stamps = [n.created_at for n in inbox]
        assert stamps == sorted(stamps, reverse=True)

    def test_only_own_notifications(self, client_id, courier_id):
        _general(client_id, 2)
        _general(courier_id, 1)
        assert len(get_notifications(client_id)) == 2
        assert get_unread_count(courier_id) == 1


class TestMarkRead:
    def test_mark_one(self, client_id):
        (notification_id,) = _general(client_id)
        current_domain.process(
            MarkNotificationRead(caller_id=client_id, notification_id=notification_id),
            asynchronous=False,
        )
        assert current_domain.repository_for(Notification).get(notification_id).read is True
        assert get_unread_count(client_id) == 0

    def test_cannot_mark_someone_elses(self, client_id, courier_id):
        (notification_id,) = _general(client_id)
        with pytest.raises(Forbidden):
            current_domain.process(
                MarkNotificationRead(caller_id=courier_id, notification_id=notification_id),
                asynchronous=False,
            )

    def test_mark_all_in_batches(self, client_id):
        _general(client_id, 5)

        first = current_domain.process(
            MarkAllNotificationsRead(caller_id=client_id, batch_size=3),
            asynchronous=False,
        )
        assert first == {"marked": 3, "has_more": True}
        assert get_unread_count(client_id) == 2

        second = current_domain.process(
            MarkAllNotificationsRead(caller_id=client_id, batch_size=3),
            asynchronous=False,
        )
        assert second == {"marked": 2, "has_more": False}
        assert get_unread_count(client_id) == 0

    def test_mark_all_with_nothing_unread(self, client_id):
        result = current_domain.process(MarkAllNotificationsRead(caller_id=client_id), asynchronous=False)
        assert result == {"marked": 0, "has_more": False}


class TestDeleteNotification:
    def test_delete_own(self, client_id):
        (notification_id,) = _general(client_id)
        current_domain.process(
            DeleteNotification(caller_id=client_id, notification_id=notification_id),
            asynchronous=False,
        )
        assert get_notifications(client_id) == []

    def test_delete_missing(self, client_id):
        with pytest.raises(NotFound):
            current_domain.process(
                DeleteNotification(caller_id=client_id, notification_id="missing"),
                asynchronous=False,
            )
