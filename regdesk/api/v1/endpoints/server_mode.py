# regdesk/api/v1/endpoints/server_mode.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from regdesk.api import deps
from regdesk.core.permissions import Permission
from regdesk.db.session import get_db
from regdesk.models.user import User
from regdesk.schemas.server_mode import (
    ServerMode as ServerModeSchema,
    ServerModeHistory,
    ServerModeSet,
)
from regdesk.services import server_mode_gate

router = APIRouter(prefix="/server-mode", tags=["Server Mode"])


@router.get("", response_model=ServerModeSchema)
def get_current_server_mode(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.VIEW_SERVER_MODE)),
):
    return server_mode_gate.get_current_mode(db)


@router.post("", response_model=ServerModeSchema, status_code=status.HTTP_201_CREATED)
def set_server_mode(
    mode_in: ServerModeSet,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.EDIT_SERVER_MODE)),
):
    """Switch the server mode. Each change is a new row in the history."""
    return server_mode_gate.set_mode(db, mode_in.mode.value, current_user)


@router.get("/history", response_model=ServerModeHistory)
def get_server_mode_history(
    skip: int = Query(0, ge=0),
    limit: int = Query(15, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.EDIT_SERVER_MODE)),
):
    items, total = server_mode_gate.get_history(db, skip=skip, limit=limit)
    return {"items": items, "total": total, "skip": skip, "limit": limit}
