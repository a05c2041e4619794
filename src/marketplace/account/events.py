"""Domain events for the User aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="User")
class UserRegistered:
    """A user record was created on first authentication."""

    __version__ = 1

    user_id: Identifier(required=True)
    external_id: String(required=True)
    name: String(required=True)
    email: String(required=True)
    role: String(required=True)
    registered_at: DateTime(required=True)


@marketplace.event(part_of="User")
class UserProfileUpdated:
    """The user edited their display name, phone or avatar."""

    __version__ = 1

    user_id: Identifier(required=True)
    name: String(required=True)
    phone: String()
    avatar_ref: String()


@marketplace.event(part_of="User")
class UserRoleChanged:
    """A user's role was changed (by an admin, or by courier onboarding)."""

    __version__ = 1

    user_id: Identifier(required=True)
    previous_role: String(required=True)
    new_role: String(required=True)
    changed_by: Identifier()
    changed_at: DateTime(required=True)


@marketplace.event(part_of="User")
class UserAccessChanged:
    """A user was enabled or disabled by an admin."""

    __version__ = 1

    user_id: Identifier(required=True)
    is_enabled: Boolean(required=True)
    changed_by: Identifier()
    changed_at: DateTime(required=True)


@marketplace.event(part_of="User")
class UserVerified:
    """A user's identity documents were accepted."""

    __version__ = 1

    user_id: Identifier(required=True)
    verified_at: DateTime(required=True)


@marketplace.event(part_of="User")
class BalanceCredited:
    """An approved ledger entry was added to the user's wallet balance."""

    __version__ = 1

    user_id: Identifier(required=True)
    transaction_id: Identifier(required=True)
    amount: Float(required=True)
    new_balance: Float(required=True)
    credited_at: DateTime(required=True)
