"""
Shared fixtures.

Every test gets a fresh in-memory SQLite store and a local identity provider;
no network access and no Supabase project are needed.
"""

import uuid
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from clock import get_today
from database import Base, import_models, make_engine
from datastore import get_store
from identity import LocalIdentityProvider, get_identity_provider
from main import app
from services.notification_service import SessionNotifier, get_session_notifier
from sql_store import SqlStore

TODAY = date(2026, 10, 17)
PASSWORD = "correct horse battery"


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    import_models()
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlStore(session_factory)


@pytest.fixture
def identity(session_factory):
    return LocalIdentityProvider(session_factory, secret="test-secret")


@pytest.fixture
def notifier():
    return SessionNotifier()


@pytest.fixture
def client(store, identity, notifier):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_today] = lambda: TODAY
    app.dependency_overrides[get_session_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(identity):
    """Create an account; returns (user_id, auth headers)."""

    def _make(email: str):
        user_id = identity.create_user(email, PASSWORD)
        token = identity.create_token(user_id, email)
        return user_id, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com")


@pytest.fixture
def make_category(store):
    def _make(name: str, user_id: str = None) -> str:
        row = store.admin().insert("categories", {"name": name, "user_id": user_id})
        return row["id"]

    return _make


@pytest.fixture
def groceries(make_category):
    return make_category("Groceries")


@pytest.fixture
def salary(make_category):
    return make_category("Salary")


def tx_body(category_id: str, amount: float = 50.0, day: str = "2026-10-10", type: str = "expense", **extra):
    return {"type": type, "amount": amount, "category_id": category_id, "date": day, **extra}


def random_id() -> str:
    return str(uuid.uuid4())
