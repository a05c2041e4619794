"""Notifications react to Transaction events — deposit outcomes."""

from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.ledger.events import DepositApproved, DepositRejected
from marketplace.notification.fanout import notify_from_template
from marketplace.notification.notification import Notification, NotificationType

WALLET_URL = "/wallet"


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::transaction")
class LedgerNotificationHandler:
    @handle(DepositApproved)
    def on_deposit_approved(self, event: DepositApproved) -> None:
        notify_from_template(
            event.user_id,
            NotificationType.PAYMENT_RECEIVED.value,
            {"amount": event.amount},
            action_url=WALLET_URL,
            transaction_id=event.transaction_id,
            amount=event.amount,
        )

    @handle(DepositRejected)
    def on_deposit_rejected(self, event: DepositRejected) -> None:
        notify_from_template(
            event.user_id,
            NotificationType.DEPOSIT_REJECTED.value,
            {"amount": event.amount, "reason": event.reason},
            action_url=WALLET_URL,
            transaction_id=event.transaction_id,
            amount=event.amount,
        )
