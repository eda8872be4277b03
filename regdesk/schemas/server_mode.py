# regdesk/schemas/server_mode.py
from pydantic import BaseModel
from typing import List, Optional
from enum import Enum
from datetime import datetime


class Mode(str, Enum):
    onsite = "onsite"
    online = "online"
    both = "both"
    deactivate = "deactivate"


class ServerModeSet(BaseModel):
    mode: Mode


class ServerMode(BaseModel):
    id: int
    mode: Mode
    activated_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ServerModeHistory(BaseModel):
    items: List[ServerMode]
    total: int
    skip: int
    limit: int
