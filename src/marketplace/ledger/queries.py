"""Read functions over ledger transactions.

Proof references are resolved to URLs at read time; the admin queue also
joins in the requester's name and email.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_role
from marketplace.account.user import User, UserRole
from marketplace.ledger.transaction import Transaction, TransactionStatus
from marketplace.storage import get_blob_store
from marketplace.utils.repository import bounded_limit

USER_TRANSACTIONS_LIMIT = 50
PENDING_TRANSACTIONS_LIMIT = 100


def transaction_view(transaction: Transaction) -> dict:
    return {
        "id": str(transaction.id),
        "user_id": str(transaction.user_id),
        "transaction_type": transaction.transaction_type,
        "amount": transaction.amount,
        "status": transaction.status,
        "description": transaction.description,
        "order_id": str(transaction.order_id) if transaction.order_id else None,
        "proof_url": get_blob_store().url_for(transaction.proof_ref),
        "rejection_reason": transaction.rejection_reason,
        "reviewed_at": transaction.reviewed_at,
        "created_at": transaction.created_at,
    }


def get_user_transactions(caller_id, limit=None) -> list[dict]:
    user = require_caller(caller_id)
    transactions = (
        current_domain.repository_for(Transaction)
        ._dao.query.filter(user_id=str(user.id))
        .order_by("-created_at")
        .limit(bounded_limit(limit, USER_TRANSACTIONS_LIMIT))
        .all()
        .items
    )
    return [transaction_view(transaction) for transaction in transactions]


def get_pending_transactions(caller_id, limit=None) -> list[dict]:
    """Admin review queue, newest first, with the requester attached."""
    require_role(caller_id, UserRole.ADMIN.value)
    transactions = (
        current_domain.repository_for(Transaction)
        ._dao.query.filter(status=TransactionStatus.PENDING.value)
        .order_by("-created_at")
        .limit(bounded_limit(limit, PENDING_TRANSACTIONS_LIMIT))
        .all()
        .items
    )

    user_repo = current_domain.repository_for(User)
    requesters = {}
    views = []
    for transaction in transactions:
        owner_id = str(transaction.user_id)
        if owner_id not in requesters:
            try:
                requesters[owner_id] = user_repo.get(owner_id)
            except ObjectNotFoundError:
                requesters[owner_id] = None

        owner = requesters[owner_id]
        view = transaction_view(transaction)
        view["user_name"] = owner.name if owner else None
        view["user_email"] = owner.email if owner else None
        views.append(view)
    return views
