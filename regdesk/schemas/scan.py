# regdesk/schemas/scan.py
from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime

from regdesk.schemas.registration import Registration


class ScanRequest(BaseModel):
    # Which credential is being printed at the desk
    target: Literal["badge", "ticket"] = "badge"


class Scan(BaseModel):
    id: int
    registration_id: str
    ticket_number: str
    scanned_by: Optional[str] = None
    scanned_at: Optional[datetime] = None
    target: str
    # Statuses as they were when the ticket was presented
    badge_status: Optional[str] = None
    ticket_status: Optional[str] = None
    payment_status: Optional[str] = None

    model_config = {"from_attributes": True}


class ScanResult(BaseModel):
    registration: Registration
    scan: Scan
