"""Deposit requests and their admin review — commands and handler.

Approval writes two aggregates: the transaction moves to approved and the
owner's balance is credited. Both are added to the same unit of work, so
either both are committed or neither is.
"""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.access.guard import require_caller, require_role
from marketplace.account.user import User, UserRole
from marketplace.domain import marketplace
from marketplace.ledger.transaction import Transaction
from marketplace.utils.repository import get_or_raise

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Transaction")
class RequestDeposit:
    caller_id = Identifier()
    amount = Float(required=True)
    description = String(max_length=500)
    proof_ref = String(max_length=255)


@marketplace.command(part_of="Transaction")
class ApproveDeposit:
    caller_id = Identifier()
    transaction_id = Identifier(required=True)


@marketplace.command(part_of="Transaction")
class RejectDeposit:
    caller_id = Identifier()
    transaction_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Transaction)
class DepositHandler:
    @handle(RequestDeposit)
    def request_deposit(self, command):
        user = require_caller(command.caller_id)
        transaction = Transaction.request_deposit(
            user_id=user.id,
            amount=command.amount,
            description=command.description,
            proof_ref=command.proof_ref,
        )
        current_domain.repository_for(Transaction).add(transaction)
        return str(transaction.id)

    @handle(ApproveDeposit)
    def approve_deposit(self, command):
        admin = require_role(command.caller_id, UserRole.ADMIN.value)
        transaction = get_or_raise(Transaction, command.transaction_id, "Transaction not found")
        transaction.approve(reviewed_by=admin.id)

        owner = get_or_raise(User, transaction.user_id, "User not found")
        owner.credit(transaction.amount, transaction_id=transaction.id)

        current_domain.repository_for(Transaction).add(transaction)
        current_domain.repository_for(User).add(owner)

        logger.info(
            "Deposit approved",
            transaction_id=str(transaction.id),
            user_id=str(owner.id),
            amount=transaction.amount,
            new_balance=owner.balance,
        )
        return {"success": True}

    @handle(RejectDeposit)
    def reject_deposit(self, command):
        admin = require_role(command.caller_id, UserRole.ADMIN.value)
        transaction = get_or_raise(Transaction, command.transaction_id, "Transaction not found")
        transaction.reject(reason=command.reason, reviewed_by=admin.id)
        current_domain.repository_for(Transaction).add(transaction)
        return {"success": True}
