"""Transaction aggregate (CQRS) — a wallet ledger entry.

Only deposits are created today: a user requests one with proof of payment
and an admin approves or rejects it. The other types exist in the ledger's
vocabulary but nothing creates them yet.

State Machine (3 states):
    PENDING → APPROVED | REJECTED
    APPROVED, REJECTED → (terminal)
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace
from marketplace.errors import Conflict
from marketplace.ledger.events import DepositApproved, DepositRejected, DepositRequested


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    PAYMENT = "payment"
    REFUND = "refund"
    EARNING = "earning"


class TransactionStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@marketplace.aggregate
class Transaction:
    user_id = Identifier(required=True)
    transaction_type = String(choices=TransactionType, required=True)
    amount = Float(required=True)
    status = String(choices=TransactionStatus, default=TransactionStatus.PENDING.value)
    proof_ref = String(max_length=255)
    description = String(max_length=500)
    order_id = Identifier()
    rejection_reason = String(max_length=500)
    reviewed_by = Identifier()
    reviewed_at = DateTime()
    created_at = DateTime()

    @invariant.post
    def amount_must_be_positive(self):
        if self.amount is not None and self.amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than 0"]})

    @classmethod
    def request_deposit(cls, user_id, amount, description=None, proof_ref=None):
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than 0"]})

        now = datetime.now(UTC)
        transaction = cls(
            user_id=user_id,
            transaction_type=TransactionType.DEPOSIT.value,
            amount=amount,
            status=TransactionStatus.PENDING.value,
            proof_ref=proof_ref,
            description=description,
            created_at=now,
        )
        transaction.raise_(
            DepositRequested(
                transaction_id=str(transaction.id),
                user_id=str(user_id),
                amount=amount,
                proof_ref=proof_ref,
                requested_at=now,
            )
        )
        return transaction

    def _assert_pending_deposit(self):
        if self.transaction_type != TransactionType.DEPOSIT.value:
            raise Conflict("Only deposits can be reviewed")
        if self.status != TransactionStatus.PENDING.value:
            raise Conflict("Transaction is not pending")

    def approve(self, reviewed_by=None):
        """Approve a pending deposit. Crediting the owner is the caller's job, in the same unit of work."""
        self._assert_pending_deposit()

        now = datetime.now(UTC)
        self.status = TransactionStatus.APPROVED.value
        self.reviewed_by = reviewed_by
        self.reviewed_at = now

        self.raise_(
            DepositApproved(
                transaction_id=str(self.id),
                user_id=str(self.user_id),
                amount=self.amount,
                reviewed_by=str(reviewed_by) if reviewed_by else None,
                reviewed_at=now,
            )
        )

    def reject(self, reason=None, reviewed_by=None):
        self._assert_pending_deposit()

        now = datetime.now(UTC)
        self.status = TransactionStatus.REJECTED.value
        self.rejection_reason = reason
        self.reviewed_by = reviewed_by
        self.reviewed_at = now

        self.raise_(
            DepositRejected(
                transaction_id=str(self.id),
                user_id=str(self.user_id),
                amount=self.amount,
                reason=reason,
                reviewed_by=str(reviewed_by) if reviewed_by else None,
                reviewed_at=now,
            )
        )
