# regdesk/services/server_mode_gate.py
"""
Server-mode gate.

The current mode is the newest row of the append-only ``server_modes`` log.
Every intake and scan consults it; changing it inserts a new row.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from regdesk.crud.crud_server_mode import server_mode as server_mode_crud
from regdesk.middleware.error_handler import (
    AuthorizationError,
    ConfigurationMissing,
    ValidationError,
)
from regdesk.models.server_mode import ServerMode
from regdesk.models.user import User
from regdesk.schemas.registration import RegistrationType
from regdesk.schemas.server_mode import Mode

logger = logging.getLogger(__name__)

# Modes in which each intake channel accepts registrations
INTAKE_MODES = {
    RegistrationType.onsite.value: frozenset({Mode.onsite.value, Mode.both.value}),
    RegistrationType.online.value: frozenset({Mode.online.value, Mode.both.value}),
    RegistrationType.pre_registered.value: frozenset(
        {Mode.onsite.value, Mode.online.value, Mode.both.value}
    ),
    RegistrationType.complimentary.value: frozenset(
        {Mode.onsite.value, Mode.online.value, Mode.both.value}
    ),
}

SCANNING_MODES = frozenset({Mode.onsite.value, Mode.online.value, Mode.both.value})

_DEFAULT_CHANNELS = {
    Mode.online.value: RegistrationType.online.value,
    Mode.onsite.value: RegistrationType.onsite.value,
    Mode.both.value: RegistrationType.onsite.value,
}


def get_current_mode(db: Session) -> ServerMode:
    current = server_mode_crud.get_latest(db)
    if current is None:
        raise ConfigurationMissing("No server mode Configured")
    return current


def set_mode(db: Session, mode: str, actor: Optional[User]) -> ServerMode:
    """Records a mode change. History rows are never modified."""
    try:
        mode = Mode(mode).value
    except ValueError:
        allowed = ", ".join(m.value for m in Mode)
        raise ValidationError({"mode": [f"Input should be one of: {allowed}"]}) from None

    row = server_mode_crud.create(db, mode=mode, activated_by=actor.id if actor else None)
    logger.info(f"Server mode set to '{mode}' by {actor.id if actor else 'system'}")
    return row


def get_history(db: Session, skip: int = 0, limit: int = 15) -> Tuple[List[ServerMode], int]:
    return server_mode_crud.get_history(db, skip=skip, limit=limit)


def default_channel_for(mode: str) -> Optional[str]:
    """Channel assumed when an intake omits ``registration_type``."""
    return _DEFAULT_CHANNELS.get(mode)


def ensure_intake_allowed(mode: str, channel: str) -> None:
    if mode == Mode.deactivate.value:
        raise AuthorizationError(
            "Registration is closed.", details={"mode": mode, "channel": channel}
        )
    if mode not in INTAKE_MODES.get(channel, frozenset()):
        raise AuthorizationError(
            f"{channel} registration is not accepted while the server is in '{mode}' mode.",
            details={"mode": mode, "channel": channel},
        )


def ensure_scanning_allowed(mode: str) -> None:
    if mode not in SCANNING_MODES:
        raise AuthorizationError(
            "Check-in is disabled while the server is deactivated.",
            details={"mode": mode},
        )
