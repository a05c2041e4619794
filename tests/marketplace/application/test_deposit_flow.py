"""Application tests for wallet deposits and their admin review."""

import pytest
from marketplace.account.user import User
from marketplace.errors import Conflict, InvalidRole, NotFound
from marketplace.ledger import deposit
from marketplace.ledger.deposit import ApproveDeposit, RejectDeposit, RequestDeposit
from marketplace.ledger.queries import get_pending_transactions, get_user_transactions
from marketplace.ledger.transaction import Transaction
from marketplace.notification.notification import Notification
from marketplace.storage import get_blob_store
from marketplace.utils.commands import dispatch
from marketplace.utils.repository import get_or_raise
from protean import current_domain
from protean.exceptions import ValidationError


def _request(caller_id, amount=50.0, **extra):
    return current_domain.process(RequestDeposit(caller_id=caller_id, amount=amount, **extra), asynchronous=False)


def _balance(user_id):
    return current_domain.repository_for(User).get(user_id).balance


class TestRequestDeposit:
    def test_pending_deposit_created(self, client_id):
        transaction_id = _request(client_id, description="Bank transfer")
        transaction = current_domain.repository_for(Transaction).get(transaction_id)
        assert transaction.status == "pending"
        assert transaction.transaction_type == "deposit"
        assert _balance(client_id) == 0.0

    def test_amount_must_be_positive(self, client_id):
        with pytest.raises(ValidationError):
            _request(client_id, amount=0.0)


class TestApproveDeposit:
    def test_approval_credits_balance(self, admin_id, client_id):
        transaction_id = _request(client_id)
        current_domain.process(ApproveDeposit(caller_id=admin_id, transaction_id=transaction_id), asynchronous=False)

        assert current_domain.repository_for(Transaction).get(transaction_id).status == "approved"
        assert _balance(client_id) == 50.0

    def test_approve_twice_credits_once(self, admin_id, client_id):
        transaction_id = _request(client_id)
        command = ApproveDeposit(caller_id=admin_id, transaction_id=transaction_id)
        current_domain.process(command, asynchronous=False)
        with pytest.raises(Conflict):
            current_domain.process(command, asynchronous=False)
        assert _balance(client_id) == 50.0

    def test_non_admin_cannot_approve(self, client_id):
        transaction_id = _request(client_id)
        with pytest.raises(InvalidRole):
            current_domain.process(
                ApproveDeposit(caller_id=client_id, transaction_id=transaction_id),
                asynchronous=False,
            )
        assert _balance(client_id) == 0.0

    def test_unknown_transaction(self, admin_id):
        with pytest.raises(NotFound):
            current_domain.process(ApproveDeposit(caller_id=admin_id, transaction_id="missing"), asynchronous=False)

    def test_owner_notified(self, admin_id, client_id):
        transaction_id = _request(client_id, amount=120.0)
        current_domain.process(ApproveDeposit(caller_id=admin_id, transaction_id=transaction_id), asynchronous=False)

        notes = current_domain.repository_for(Notification)._dao.query.filter(user_id=client_id).all().items
        assert len(notes) == 1
        assert notes[0].notification_type == "payment_received"
        assert notes[0].amount == 120.0
        assert str(notes[0].transaction_id) == transaction_id


class TestRejectDeposit:
    def test_rejection_keeps_balance(self, admin_id, client_id):
        transaction_id = _request(client_id)
        current_domain.process(
            RejectDeposit(caller_id=admin_id, transaction_id=transaction_id, reason="Proof missing"),
            asynchronous=False,
        )
        transaction = current_domain.repository_for(Transaction).get(transaction_id)
        assert transaction.status == "rejected"
        assert transaction.rejection_reason == "Proof missing"
        assert _balance(client_id) == 0.0

        notes = current_domain.repository_for(Notification)._dao.query.filter(user_id=client_id).all().items
        assert [n.notification_type for n in notes] == ["deposit_rejected"]
        assert "Proof missing" in notes[0].message

    def test_cannot_approve_after_rejection(self, admin_id, client_id):
        transaction_id = _request(client_id)
        current_domain.process(RejectDeposit(caller_id=admin_id, transaction_id=transaction_id), asynchronous=False)
        with pytest.raises(Conflict):
            current_domain.process(ApproveDeposit(caller_id=admin_id, transaction_id=transaction_id), asynchronous=False)


class TestLedgerQueries:
    def test_user_sees_own_transactions_with_proof_url(self, client_id, make_user):
        proof = get_blob_store().put(b"%PDF", "application/pdf")
        _request(client_id, proof_ref=proof.ref)
        _request(make_user("client"))

        views = get_user_transactions(client_id)
        assert len(views) == 1
        assert views[0]["proof_url"] == f"/uploads/{proof.ref}"

    def test_pending_queue_joins_requester(self, admin_id, client_id):
        _request(client_id)
        views = get_pending_transactions(admin_id)
        assert len(views) == 1
        assert views[0]["user_name"] == "Salma Client"
        assert views[0]["user_email"].endswith("@example.com")

    def test_pending_queue_is_admin_only(self, client_id):
        with pytest.raises(InvalidRole):
            get_pending_transactions(client_id)


class TestInterleavedApproval:
    """A second admin approves from a copy read before the first approval committed."""

    def test_stale_approval_conflicts_and_credits_once(self, monkeypatch, make_user, admin_id, client_id):
        other_admin = make_user("admin")
        transaction_id = _request(client_id)
        stale = [current_domain.repository_for(Transaction).get(transaction_id)]

        dispatch(ApproveDeposit(caller_id=admin_id, transaction_id=transaction_id))

        def load(aggregate_cls, identifier, message=None):
            if aggregate_cls is Transaction and stale:
                return stale.pop()
            return get_or_raise(aggregate_cls, identifier, message)

        monkeypatch.setattr(deposit, "get_or_raise", load)
        with pytest.raises(Conflict):
            dispatch(ApproveDeposit(caller_id=other_admin, transaction_id=transaction_id))

        assert current_domain.repository_for(Transaction).get(transaction_id).status == "approved"
        assert _balance(client_id) == 50.0
