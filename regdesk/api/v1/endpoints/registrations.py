# regdesk/api/v1/endpoints/registrations.py
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Header, Query, Request, Response, status
from sqlalchemy.orm import Session

from regdesk.api import deps
from regdesk.core.config import settings
from regdesk.core.limiter import limiter
from regdesk.core.permissions import Permission
from regdesk.core.storage import get_asset_store
from regdesk.db.session import get_db
from regdesk.middleware.error_handler import ServiceUnavailable
from regdesk.models.user import User
from regdesk.schemas.registration import (
    QrRegenerationAccepted,
    Registration as RegistrationSchema,
    RegistrationList,
    RegistrationType,
)
from regdesk.schemas.scan import Scan as ScanSchema, ScanRequest, ScanResult
from regdesk.services import badge_assets
from regdesk.services.check_in import check_in
from regdesk.services.ticket_issuance import ticket_issuance

router = APIRouter(prefix="/registrations", tags=["Registrations"])


@router.post(
    "",
    response_model=RegistrationSchema,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.REGISTRATION_RATE_LIMIT)
def create_registration(
    request: Request,
    response: Response,
    payload: Dict[str, Any] = Body(...),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    store=Depends(get_asset_store),
    current_user: Optional[User] = Depends(deps.get_current_user_optional),
):
    """
    Register an attendee.

    The public online form needs no authentication; onsite, pre-registered and
    complimentary intake require the `create-registration` permission. Sending
    the same `Idempotency-Key` again returns the original registration with 200.
    """
    registration, created = ticket_issuance.register(
        db,
        payload,
        actor=current_user,
        store=store,
        idempotency_key=idempotency_key,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return registration


@router.get("", response_model=RegistrationList)
def list_registrations(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    search: Optional[str] = Query(None, description="Ticket number fragment or exact email"),
    registration_type: Optional[RegistrationType] = None,
    confirmed: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.VIEW_REGISTRATIONS)),
):
    items, total = ticket_issuance.list_registrations(
        db,
        skip=skip,
        limit=limit,
        search=search,
        registration_type=registration_type.value if registration_type else None,
        confirmed=confirmed,
    )
    return {"items": items, "total": total}


@router.get("/{ticket_number}", response_model=RegistrationSchema)
def get_registration(
    ticket_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.VIEW_REGISTRATIONS)),
):
    return ticket_issuance.get_by_ticket(db, ticket_number)


@router.patch("/{ticket_number}", response_model=RegistrationSchema)
def update_registration(
    ticket_number: str,
    changes: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.EDIT_REGISTRATION)),
):
    """Correct identity or survey fields. Rejected with 409 once the attendee has checked in."""
    return ticket_issuance.update_identity(db, ticket_number, changes)


@router.post("/{ticket_number}/scan", response_model=ScanResult)
def scan_registration(
    ticket_number: str,
    scan_in: Optional[ScanRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.SCAN_REGISTRATION)),
):
    """Check an attendee in and advance the badge (default) or ticket print status."""
    target = scan_in.target if scan_in else "badge"
    registration, scan = check_in.scan(db, ticket_number, current_user, target=target)
    return {"registration": registration, "scan": scan}


@router.get("/{ticket_number}/scans", response_model=List[ScanSchema])
def list_scans(
    ticket_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.VIEW_REGISTRATIONS)),
):
    return check_in.list_scans(db, ticket_number)


@router.post("/{ticket_number}/print-badge", response_model=RegistrationSchema)
def print_badge(
    ticket_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.EDIT_REGISTRATION)),
):
    return check_in.print_badge(db, ticket_number)


@router.post("/{ticket_number}/print-ticket", response_model=RegistrationSchema)
def print_ticket(
    ticket_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.EDIT_REGISTRATION)),
):
    return check_in.print_ticket(db, ticket_number)


@router.post(
    "/{ticket_number}/qr",
    response_model=QrRegenerationAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
def regenerate_qr(
    ticket_number: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.EDIT_REGISTRATION)),
):
    """Queue a fresh QR image. Poll `GET /assets/{ticket_number}.png` for the result."""
    registration = ticket_issuance.get_by_ticket(db, ticket_number)
    if not badge_assets.enqueue(registration.ticket_number):
        raise ServiceUnavailable("QR generation could not be queued.", service="task_queue")
    return {
        "ticket_number": registration.ticket_number,
        "asset_path": badge_assets.asset_path_for(registration.ticket_number),
    }
