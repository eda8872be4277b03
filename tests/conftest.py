# tests/conftest.py

import os

# Must be set before the application settings are imported
os.environ.setdefault("ENV", "local")
os.environ.setdefault("DATABASE_URL_LOCAL", "sqlite://")
os.environ.setdefault("REGISTRATION_RATE_LIMIT", "10000/minute")

import pytest
from starlette.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from regdesk.main import app
from regdesk.core.limiter import limiter
from regdesk.core.storage import LocalAssetStore, get_asset_store
from regdesk.db.session import get_db
from regdesk.db.init_db import init_db
from regdesk.models import Base
from regdesk.services import badge_assets

from tests.utils.auth import auth_headers, create_staff_user, get_superadmin


# --- Test Database Setup ---
# One in-memory SQLite database per test, shared across threads by StaticPool.
@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """A session on a freshly seeded database (print statuses, roles, superadmin, mode)."""
    session = session_factory()
    init_db(session)
    yield session
    session.close()


@pytest.fixture(scope="function")
def asset_store(tmp_path):
    return LocalAssetStore(tmp_path / "assets")


@pytest.fixture(scope="function")
def enqueued(monkeypatch):
    """Captures QR generation hand-offs instead of talking to the broker."""
    tickets = []

    def fake_enqueue(ticket_number):
        tickets.append(ticket_number)
        return True

    monkeypatch.setattr(badge_assets, "enqueue", fake_enqueue)
    return tickets


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def test_client(db_session, asset_store, enqueued):
    """
    Provides a TestClient backed by the seeded in-memory database and a
    temporary asset store. Authentication is real: use the header fixtures.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_asset_store] = lambda: asset_store
    limiter.enabled = False

    with TestClient(app) as client:
        yield client

    limiter.enabled = True
    app.dependency_overrides.clear()


# --- Authenticated users ---
@pytest.fixture(scope="function")
def superadmin(db_session):
    return get_superadmin(db_session)


@pytest.fixture(scope="function")
def admin_user(db_session):
    return create_staff_user(db_session, role_name="admin", email="desk.admin@regdesk.io")


@pytest.fixture(scope="function")
def plain_user(db_session):
    return create_staff_user(db_session, role_name="user", email="attendee@regdesk.io")


@pytest.fixture(scope="function")
def superadmin_headers(superadmin):
    return auth_headers(superadmin)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture(scope="function")
def user_headers(plain_user):
    return auth_headers(plain_user)
