"""Shared fixtures for the minter service test suite.

Environment variables are set before any minter_service import so the
module-level Settings() and engine pick up test values.
"""

from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="minter-tests-")

os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/app.db"
os.environ["HANDCASH_APP_ID"] = "test-app-id"
os.environ["HANDCASH_APP_SECRET"] = "test-app-secret"
os.environ["HANDCASH_BASE_URL"] = "https://cloud.handcash.test"
os.environ["HANDCASH_MINTER_APP_ID"] = "minter-app-id"
os.environ["HANDCASH_MINTER_APP_SECRET"] = "minter-app-secret"
os.environ["HANDCASH_MINTER_AUTH_TOKEN"] = "minter-auth-token"
os.environ["APP_URL"] = "https://minter.test"
os.environ["MINT_POLL_INITIAL_DELAY"] = "0"
os.environ["MINT_POLL_BASE_INTERVAL"] = "0.001"
os.environ["MINT_POLL_MAX_INTERVAL"] = "0.001"
os.environ["MINT_POLL_TIMEOUT"] = "2"
os.environ["WEBHOOK_MINT_ENABLED"] = "false"

from unittest.mock import AsyncMock, patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from minter_service.app.db.base import Base  # noqa: E402
from minter_service.app.db.session import get_db  # noqa: E402
from minter_service.app.models.item import Collection, Item, Seed  # noqa: E402,F401
from minter_service.app.models.payment import PaymentRequest, WebhookEvent  # noqa: E402,F401
from minter_service.app.models.user import User  # noqa: E402

HANDCASH = "minter_service.app.services.handcash_service"

PROFILE = {
    "publicProfile": {
        "id": "hc-user-1",
        "handle": "alice",
        "displayName": "Alice",
        "paymail": "alice@handcash.io",
    },
    "privateProfile": {"email": "alice@example.com"},
}


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def user(db) -> User:
    user = User(handle="alice", auth_token="token-alice")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def app(session_factory):
    from minter_service.app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture()
def auth_client(client, user):
    """Client whose session cookie carries alice's auth token."""
    with patch(f"{HANDCASH}.get_current_profile", AsyncMock(return_value=PROFILE)):
        resp = client.get("/auth", params={"authToken": user.auth_token}, follow_redirects=False)
    assert resp.status_code == 302
    return client
