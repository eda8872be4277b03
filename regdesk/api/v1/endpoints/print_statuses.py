# regdesk/api/v1/endpoints/print_statuses.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from regdesk.api import deps
from regdesk.core.permissions import Permission
from regdesk.crud.crud_print_status import print_status as print_status_crud
from regdesk.db.session import get_db
from regdesk.models.user import User
from regdesk.schemas.print_status import PrintStatus as PrintStatusSchema

router = APIRouter(prefix="/print-statuses", tags=["Print Statuses"])


@router.get("", response_model=List[PrintStatusSchema])
def list_print_statuses(
    type: Optional[Literal["badge", "ticket"]] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.VIEW_REGISTRATIONS)),
):
    return print_status_crud.get_all(db, type=type)
