# tests/services/test_server_mode_gate.py

import pytest

from regdesk.middleware.error_handler import (
    AuthorizationError,
    ConfigurationMissing,
    ValidationError,
)
from regdesk.models.server_mode import ServerMode
from regdesk.services import server_mode_gate


@pytest.mark.parametrize(
    "mode, channel, allowed",
    [
        ("onsite", "onsite", True),
        ("both", "onsite", True),
        ("online", "onsite", False),
        ("online", "online", True),
        ("both", "online", True),
        ("onsite", "online", False),
        ("onsite", "pre-registered", True),
        ("online", "complimentary", True),
        ("deactivate", "onsite", False),
        ("deactivate", "online", False),
        ("deactivate", "complimentary", False),
    ],
)
def test_intake_gate(mode, channel, allowed):
    if allowed:
        server_mode_gate.ensure_intake_allowed(mode, channel)
    else:
        with pytest.raises(AuthorizationError):
            server_mode_gate.ensure_intake_allowed(mode, channel)


def test_scanning_gate():
    for mode in ("onsite", "online", "both"):
        server_mode_gate.ensure_scanning_allowed(mode)
    with pytest.raises(AuthorizationError):
        server_mode_gate.ensure_scanning_allowed("deactivate")


def test_default_channel():
    assert server_mode_gate.default_channel_for("online") == "online"
    assert server_mode_gate.default_channel_for("onsite") == "onsite"
    assert server_mode_gate.default_channel_for("both") == "onsite"
    assert server_mode_gate.default_channel_for("deactivate") is None


def test_current_mode_is_latest_row(db_session):
    server_mode_gate.set_mode(db_session, "online", None)
    server_mode_gate.set_mode(db_session, "both", None)

    assert server_mode_gate.get_current_mode(db_session).mode == "both"
    # Changes never rewrite history
    assert [row.mode for row in db_session.query(ServerMode).order_by(ServerMode.id)] == [
        "onsite",
        "online",
        "both",
    ]


def test_missing_mode_is_configuration_error(db_session):
    db_session.query(ServerMode).delete()
    db_session.commit()

    with pytest.raises(ConfigurationMissing):
        server_mode_gate.get_current_mode(db_session)


def test_set_unknown_mode(db_session):
    with pytest.raises(ValidationError) as exc_info:
        server_mode_gate.set_mode(db_session, "maintenance", None)

    assert "mode" in exc_info.value.fields
