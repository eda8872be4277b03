# regdesk/schemas/print_status.py
from pydantic import BaseModel
from typing import Optional


class PrintStatus(BaseModel):
    id: int
    type: str
    name: str
    description: Optional[str] = None
    active: bool

    model_config = {"from_attributes": True}
