"""Application tests for the dashboard projections."""

import pytest
from marketplace.errors import InvalidRole
from marketplace.ledger.deposit import ApproveDeposit, RequestDeposit
from marketplace.order.acceptance import AcceptOrder
from marketplace.order.cancellation import CancelOrder
from marketplace.order.delivery import CompleteDelivery
from marketplace.projections.dashboards import get_client_order_stats, get_courier_stats, get_platform_stats
from protean import current_domain


def _accept(courier_id, order_id):
    current_domain.process(AcceptOrder(caller_id=courier_id, order_id=order_id), asynchronous=False)


def _deliver(client_id, order_id, rating=5):
    current_domain.process(
        CompleteDelivery(caller_id=client_id, order_id=order_id, rating=rating),
        asynchronous=False,
    )


@pytest.fixture()
def busy_day(client_id, courier_id, place_order):
    """One delivered, one in transit, one cancelled and one pending order."""
    delivered = place_order(client_id, total_amount=30.0)
    _accept(courier_id, delivered)
    _deliver(client_id, delivered, rating=4)

    in_transit = place_order(client_id)
    _accept(courier_id, in_transit)

    cancelled = place_order(client_id)
    current_domain.process(CancelOrder(caller_id=client_id, order_id=cancelled), asynchronous=False)

    place_order(client_id)


class TestPlatformStats:
    def test_empty_dashboard(self, admin_id):
        stats = get_platform_stats(admin_id)
        assert stats["total_orders"] == 0
        assert stats["total_revenue"] == 0.0

    def test_counts_orders_by_status(self, admin_id, busy_day):
        stats = get_platform_stats(admin_id)
        assert stats["total_orders"] == 4
        assert stats["pending_orders"] == 1
        assert stats["in_transit_orders"] == 1
        assert stats["delivered_orders"] == 1
        assert stats["cancelled_orders"] == 1
        assert stats["total_revenue"] == pytest.approx(30.0)

    def test_counts_users_and_couriers(self, admin_id, client_id, courier_id):
        stats = get_platform_stats(admin_id)
        assert stats["total_users"] == 3
        assert stats["total_couriers"] == 1

    def test_tracks_deposit_queue(self, admin_id, client_id):
        first = current_domain.process(RequestDeposit(caller_id=client_id, amount=10.0), asynchronous=False)
        current_domain.process(RequestDeposit(caller_id=client_id, amount=20.0), asynchronous=False)
        current_domain.process(ApproveDeposit(caller_id=admin_id, transaction_id=first), asynchronous=False)
        assert get_platform_stats(admin_id)["pending_deposits"] == 1

    def test_admin_only(self, client_id):
        with pytest.raises(InvalidRole):
            get_platform_stats(client_id)


class TestCourierStats:
    def test_courier_dashboard(self, courier_id, busy_day):
        stats = get_courier_stats(courier_id)
        assert stats["active_orders"] == 1
        assert stats["delivered_orders"] == 1
        assert stats["total_earnings"] == pytest.approx(30.0)
        assert stats["rating"] == pytest.approx(4.0)
        assert stats["rating_count"] == 1

    def test_fresh_courier_reads_zero(self, courier_id):
        stats = get_courier_stats(courier_id)
        assert stats["active_orders"] == 0
        assert stats["rating"] is None


class TestClientOrderStats:
    def test_client_dashboard(self, client_id, busy_day):
        stats = get_client_order_stats(client_id)
        assert stats["total_orders"] == 4
        assert stats["pending_orders"] == 1
        assert stats["in_transit_orders"] == 1
        assert stats["delivered_orders"] == 1
        assert stats["cancelled_orders"] == 1
        assert stats["total_spent"] == pytest.approx(30.0)
