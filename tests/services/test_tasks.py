# tests/services/test_tasks.py

import uuid
from unittest.mock import MagicMock

import pytest

from regdesk import tasks
from regdesk.core.storage import AssetStorageError
from regdesk.crud.crud_registration import registration as registration_crud
from regdesk.services.ticket_issuance import ticket_issuance
from tests.utils.auth import create_staff_user
from tests.utils.registrations import intake


@pytest.fixture
def task_env(monkeypatch, session_factory, asset_store):
    monkeypatch.setattr(tasks, "SessionLocal", session_factory)
    monkeypatch.setattr(tasks, "get_asset_store", lambda: asset_store)
    return asset_store


@pytest.fixture
def onsite_ticket(db_session, enqueued):
    staff = create_staff_user(db_session, role_name="admin")
    registration, _ = ticket_issuance.register(db_session, intake(), actor=staff)
    return registration.ticket_number


def test_generates_asset_and_records_path(db_session, task_env, onsite_ticket):
    path = tasks.generate_badge_qr(onsite_ticket)

    assert path == f"qrcodes/{onsite_ticket}.png"
    assert task_env.exists(path)
    db_session.expire_all()
    stored = registration_crud.get_by_ticket(db_session, ticket_number=onsite_ticket)
    assert stored.qr_asset_path == path


def test_unknown_ticket_is_skipped(db_session, task_env):
    assert tasks.generate_badge_qr(str(uuid.uuid4())) is None


def test_storage_failure_is_raised_for_retry(db_session, monkeypatch, session_factory, onsite_ticket):
    broken_store = MagicMock()
    broken_store.save.side_effect = AssetStorageError("bucket unavailable")
    monkeypatch.setattr(tasks, "SessionLocal", session_factory)
    monkeypatch.setattr(tasks, "get_asset_store", lambda: broken_store)

    with pytest.raises(AssetStorageError):
        tasks.generate_badge_qr(onsite_ticket)
