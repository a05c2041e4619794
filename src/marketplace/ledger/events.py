"""Domain events for the Transaction aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Transaction")
class DepositRequested:
    """A user asked for a deposit to be credited, with proof of payment."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Float(required=True)
    proof_ref = String()
    requested_at = DateTime(required=True)


@marketplace.event(part_of="Transaction")
class DepositApproved:
    """An admin approved a pending deposit; the owner's balance was credited."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Float(required=True)
    reviewed_by = Identifier()
    reviewed_at = DateTime(required=True)


@marketplace.event(part_of="Transaction")
class DepositRejected:
    """An admin rejected a pending deposit. No balance change."""

    __version__ = 1

    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String()
    reviewed_by = Identifier()
    reviewed_at = DateTime(required=True)
