import os

import pytest


@pytest.fixture(scope="session")
def _marketplace_domain(request):
    """Initialize the marketplace domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


@pytest.fixture(scope="session", autouse=True)
def setup_db(_marketplace_domain):
    from marketplace.utils.db import drop_db, setup_db

    setup_db(_marketplace_domain)

    yield

    drop_db(_marketplace_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_marketplace_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _marketplace_domain.domain_context()
    ctx.push()

    yield

    from marketplace.storage import reset_blob_store
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    reset_blob_store()
    ctx.pop()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_user():
    """Factory: register a user and optionally give them a role or disable them.

    Returns the new user's id.
    """
    from marketplace.account.registration import RegisterUser
    from marketplace.account.user import User
    from protean import current_domain

    counter = {"n": 0}

    def _make(role="client", name=None, enabled=True):
        counter["n"] += 1
        n = counter["n"]
        user_id = current_domain.process(
            RegisterUser(
                external_id=f"auth|{role}-{n}",
                name=name or f"{role.title()} {n}",
                email=f"{role}{n}@example.com",
                phone=f"+21260000{n:04d}",
            ),
            asynchronous=False,
        )
        if role != "client" or not enabled:
            repo = current_domain.repository_for(User)
            user = repo.get(user_id)
            user.change_role(role)
            user.set_enabled(enabled)
            repo.add(user)
        return user_id

    return _make


@pytest.fixture()
def client_id(make_user):
    return make_user("client", name="Salma Client")


@pytest.fixture()
def courier_id(make_user):
    return make_user("courier", name="Youssef Courier")


@pytest.fixture()
def admin_id(make_user):
    return make_user("admin", name="Amina Admin")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@pytest.fixture()
def place_order():
    """Factory: the given caller creates an order; returns its id."""
    from marketplace.order.creation import CreateOrder
    from protean import current_domain

    def _place(caller_id, **overrides):
        payload = {
            "item": "Documents envelope",
            "pickup_address": "12 Rue Atlas, Casablanca",
            "delivery_address": "7 Avenue Hassan II, Casablanca",
            "total_amount": 25.0,
        }
        payload.update(overrides)
        return current_domain.process(CreateOrder(caller_id=caller_id, **payload), asynchronous=False)

    return _place
