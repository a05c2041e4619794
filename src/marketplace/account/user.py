"""User aggregate root — identity, role, wallet balance and account flags.

A user is created the first time an auth subject is seen and is never
hard-deleted. The wallet balance is only ever credited through the ledger's
deposit approval; it can never go below zero.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from marketplace.domain import marketplace

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class UserRole(Enum):
    CLIENT = "client"
    ADMIN = "admin"
    COURIER = "courier"


@marketplace.aggregate
class User:
    """A person using the marketplace as a client, courier or admin."""

    external_id: String(required=True, max_length=255, unique=True)
    name: String(required=True, max_length=200)
    email: String(required=True, max_length=254)
    phone: String(max_length=30)
    role: String(choices=UserRole, default=UserRole.CLIENT.value)
    balance: Float(default=0.0)
    avatar_ref: String(max_length=255)
    is_enabled: Boolean(default=True)
    is_verified: Boolean(default=False)
    registered_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def balance_cannot_be_negative(self):
        if self.balance is not None and self.balance < 0:
            raise ValidationError({"balance": ["Balance cannot be negative"]})

    @classmethod
    def register(cls, external_id, name, email, phone=None):
        from marketplace.account.events import UserRegistered

        now = datetime.now(UTC)
        user = cls(
            external_id=external_id,
            name=name,
            email=email,
            phone=phone,
            role=UserRole.CLIENT.value,
            balance=0.0,
            is_enabled=True,
            is_verified=False,
            registered_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                external_id=external_id,
                name=name,
                email=email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def is_courier(self):
        return self.role == UserRole.COURIER.value

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN.value

    def update_profile(self, name=_UNSET, phone=_UNSET, avatar_ref=_UNSET):
        from marketplace.account.events import UserProfileUpdated

        if name is not _UNSET:
            self.name = name
        if phone is not _UNSET:
            self.phone = phone
        if avatar_ref is not _UNSET:
            self.avatar_ref = avatar_ref
        self.updated_at = datetime.now(UTC)

        self.raise_(
            UserProfileUpdated(
                user_id=str(self.id),
                name=self.name,
                phone=self.phone,
                avatar_ref=self.avatar_ref,
            )
        )

    def change_role(self, new_role, changed_by=None):
        from marketplace.account.events import UserRoleChanged

        target = UserRole(new_role)
        if self.role == target.value:
            return

        previous_role = self.role
        now = datetime.now(UTC)
        self.role = target.value
        self.updated_at = now

        self.raise_(
            UserRoleChanged(
                user_id=str(self.id),
                previous_role=previous_role,
                new_role=target.value,
                changed_by=str(changed_by) if changed_by else None,
                changed_at=now,
            )
        )

    def set_enabled(self, enabled, changed_by=None):
        from marketplace.account.events import UserAccessChanged

        if self.is_enabled == enabled:
            return

        now = datetime.now(UTC)
        self.is_enabled = enabled
        self.updated_at = now

        self.raise_(
            UserAccessChanged(
                user_id=str(self.id),
                is_enabled=enabled,
                changed_by=str(changed_by) if changed_by else None,
                changed_at=now,
            )
        )

    def verify(self):
        from marketplace.account.events import UserVerified

        if self.is_verified:
            return

        now = datetime.now(UTC)
        self.is_verified = True
        self.updated_at = now
        self.raise_(UserVerified(user_id=str(self.id), verified_at=now))

    def credit(self, amount, transaction_id):
        """Add an approved amount to the wallet balance."""
        from marketplace.account.events import BalanceCredited

        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Credit amount must be greater than 0"]})

        now = datetime.now(UTC)
        self.balance = (self.balance or 0.0) + amount
        self.updated_at = now

        self.raise_(
            BalanceCredited(
                user_id=str(self.id),
                transaction_id=str(transaction_id),
                amount=amount,
                new_balance=self.balance,
                credited_at=now,
            )
        )
