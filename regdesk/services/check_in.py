# regdesk/services/check_in.py
"""
Print / check-in state machine.

Badge and ticket each move independently through

    not_printed | queued | printing | failed  ->  printed  ->  reprinted (repeats)

and never backwards. Confirmation is a separate one-way flag set by the first
scan. This service is the only writer of status fields and Scan rows.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from regdesk.core.config import settings
from regdesk.crud.crud_print_status import print_status as print_status_crud
from regdesk.crud.crud_registration import registration as registration_crud
from regdesk.crud.crud_scan import scan as scan_crud
from regdesk.middleware.error_handler import (
    AppError,
    ConfigurationMissing,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from regdesk.models.registration import Registration
from regdesk.models.scan import Scan
from regdesk.models.user import User
from regdesk.services import server_mode_gate

logger = logging.getLogger(__name__)

NOT_PRINTED = "not_printed"
QUEUED = "queued"
PRINTING = "printing"
PRINTED = "printed"
REPRINTED = "reprinted"
FAILED = "failed"

PRINT_STATUSES = (NOT_PRINTED, QUEUED, PRINTING, PRINTED, REPRINTED, FAILED)
PRINT_TARGETS = ("badge", "ticket")

# Position in the lifecycle; a transition may only increase it
STATUS_RANK = {
    NOT_PRINTED: 0,
    QUEUED: 0,
    PRINTING: 0,
    FAILED: 0,
    PRINTED: 1,
    REPRINTED: 2,
}


def next_print_status(current: str) -> str:
    """Status after one more print of a credential currently in ``current``."""
    if current in (PRINTED, REPRINTED):
        return REPRINTED
    if current in (NOT_PRINTED, QUEUED, PRINTING, FAILED):
        return PRINTED
    raise ValueError(f"Unknown print status: {current}")


def reprint_limit_reached(print_count: int, limit: Optional[int] = None) -> bool:
    """True when one more print would exceed the allowed number of reprints."""
    if limit is None:
        limit = settings.REPRINT_LIMIT
    if limit is None:
        return False
    reprints = max(print_count - 1, 0)
    return print_count > 0 and reprints >= limit


class CheckInService:

    def scan(
        self,
        db: Session,
        ticket_number: str,
        actor: Optional[User],
        target: str = "badge",
    ) -> Tuple[Registration, Scan]:
        """
        Records a check-in: appends a Scan, confirms the registration on the
        first scan and advances the target's print status.
        """
        self._check_target(target)
        try:
            registration = self._get_locked(db, ticket_number)
            mode = server_mode_gate.get_current_mode(db)
            server_mode_gate.ensure_scanning_allowed(mode.mode)

            next_status = self._next_status_row(db, registration, target)

            # Snapshot is taken before the statuses move
            scan = scan_crud.record(
                db,
                registration=registration,
                scanned_by=actor.id if actor else None,
                target=target,
            )

            first_confirmation = not registration.confirmed
            if first_confirmation:
                registration.confirmed = True
                registration.confirmed_by = actor.id if actor else None
                registration.confirmed_at = datetime.now(timezone.utc)
            self._apply(registration, target, next_status)

            db.add(registration)
            db.commit()
        except AppError:
            # Release the row lock
            db.rollback()
            raise

        db.refresh(registration)
        db.refresh(scan)
        logger.info(
            f"Scan #{scan.id} recorded for {ticket_number}: {target} -> {next_status.name}"
            + (" (confirmed)" if first_confirmation else "")
        )
        return registration, scan

    def print_badge(self, db: Session, ticket_number: str) -> Registration:
        return self._print(db, ticket_number, "badge")

    def print_ticket(self, db: Session, ticket_number: str) -> Registration:
        return self._print(db, ticket_number, "ticket")

    def list_scans(self, db: Session, ticket_number: str) -> List[Scan]:
        registration = registration_crud.get_by_ticket(db, ticket_number=ticket_number)
        if registration is None:
            raise self._not_found(ticket_number)
        return scan_crud.get_by_registration(db, registration_id=registration.id)

    # ========================================
    # Helpers
    # ========================================

    def _print(self, db: Session, ticket_number: str, target: str) -> Registration:
        try:
            registration = self._get_locked(db, ticket_number)
            next_status = self._next_status_row(db, registration, target)
            self._apply(registration, target, next_status)
            db.add(registration)
            db.commit()
        except AppError:
            db.rollback()
            raise

        db.refresh(registration)
        logger.info(f"{target.capitalize()} for {ticket_number} marked {next_status.name}")
        return registration

    def _check_target(self, target: str) -> None:
        if target not in PRINT_TARGETS:
            raise ValidationError({"target": ["Input should be 'badge' or 'ticket'"]})

    def _get_locked(self, db: Session, ticket_number: str) -> Registration:
        registration = registration_crud.get_by_ticket(
            db, ticket_number=ticket_number, for_update=True
        )
        if registration is None:
            raise self._not_found(ticket_number)
        return registration

    def _not_found(self, ticket_number: str) -> NotFoundError:
        return NotFoundError(
            f"Registration with ticket number {ticket_number} not found.",
            details={"ticket_number": ticket_number},
        )

    def _next_status_row(self, db: Session, registration: Registration, target: str):
        current = getattr(registration, f"{target}_status")
        print_count = getattr(registration, f"{target}_print_count") or 0

        if reprint_limit_reached(print_count):
            raise ConflictError(
                "Reprint limit reached",
                details={
                    "ticket_number": registration.ticket_number,
                    "target": target,
                    "print_count": print_count,
                },
            )

        name = next_print_status(current)
        row = print_status_crud.get_by_name(db, type=target, name=name)
        if row is None:
            raise ConfigurationMissing("Print statuses not configured")
        return row

    def _apply(self, registration: Registration, target: str, status_row) -> None:
        current = getattr(registration, f"{target}_status")
        if STATUS_RANK[status_row.name] < STATUS_RANK.get(current, 0):
            raise ConflictError(f"Cannot move {target} status from {current} to {status_row.name}")
        setattr(registration, f"{target}_status_id", status_row.id)
        setattr(registration, f"{target}_status_ref", status_row)
        setattr(
            registration,
            f"{target}_print_count",
            (getattr(registration, f"{target}_print_count") or 0) + 1,
        )


check_in = CheckInService()
