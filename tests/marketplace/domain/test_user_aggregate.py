"""Tests for the User aggregate."""

import pytest
from marketplace.account.events import (
    BalanceCredited,
    UserAccessChanged,
    UserRegistered,
    UserRoleChanged,
    UserVerified,
)
from marketplace.account.user import User, UserRole
from protean.exceptions import ValidationError


def _user():
    user = User.register(external_id="auth|001", name="Salma", email="salma@example.com")
    return user


class TestRegister:
    def test_defaults(self):
        user = _user()
        assert user.role == UserRole.CLIENT.value
        assert user.balance == 0.0
        assert user.is_enabled is True
        assert user.is_verified is False
        assert isinstance(user._events[-1], UserRegistered)


class TestRoles:
    def test_change_role(self):
        user = _user()
        user.change_role("courier", changed_by="admin-001")
        assert user.is_courier
        event = user._events[-1]
        assert isinstance(event, UserRoleChanged)
        assert event.previous_role == "client"
        assert event.new_role == "courier"

    def test_same_role_is_a_no_op(self):
        user = _user()
        user._events.clear()
        user.change_role("client")
        assert user._events == []

    def test_unknown_role(self):
        with pytest.raises(ValueError):
            _user().change_role("superuser")


class TestAccess:
    def test_disable(self):
        user = _user()
        user.set_enabled(False)
        assert user.is_enabled is False
        assert isinstance(user._events[-1], UserAccessChanged)

    def test_verify_once(self):
        user = _user()
        user.verify()
        user.verify()
        assert user.is_verified is True
        assert sum(isinstance(e, UserVerified) for e in user._events) == 1


class TestBalance:
    def test_credit(self):
        user = _user()
        user.credit(50.0, transaction_id="txn-001")
        user.credit(25.0, transaction_id="txn-002")
        assert user.balance == 75.0
        assert isinstance(user._events[-1], BalanceCredited)

    def test_credit_must_be_positive(self):
        with pytest.raises(ValidationError):
            _user().credit(0, transaction_id="txn-001")

    def test_balance_cannot_go_negative(self):
        with pytest.raises(ValidationError):
            User(external_id="auth|002", name="X", email="x@example.com", balance=-1.0)
