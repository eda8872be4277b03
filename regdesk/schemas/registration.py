# regdesk/schemas/registration.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Literal, Optional
from enum import Enum
from datetime import datetime


class RegistrationType(str, Enum):
    onsite = "onsite"
    online = "online"
    pre_registered = "pre-registered"
    complimentary = "complimentary"


class PaymentStatus(str, Enum):
    paid = "paid"
    unpaid = "unpaid"
    complimentary = "complimentary"


class RegistrationBase(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: Optional[EmailStr] = Field(
        None, json_schema_extra={"example": "ana.cruz@acme.io"}
    )
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    company_name: Optional[str] = Field(
        None, max_length=255, json_schema_extra={"example": "Acme"}
    )

    job_title: Optional[str] = Field(None, max_length=255)
    industry: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=100)
    age_range: Optional[str] = Field(None, max_length=50)
    gender: Optional[str] = Field(None, max_length=50)
    referral_source: Optional[str] = Field(None, max_length=255)


class RegistrationCreate(RegistrationBase):
    first_name: str = Field(
        ..., min_length=1, max_length=255, json_schema_extra={"example": "Ana"}
    )
    last_name: str = Field(
        ..., min_length=1, max_length=255, json_schema_extra={"example": "Cruz"}
    )
    # Omitted: derived from the current server mode
    registration_type: Optional[RegistrationType] = None
    # Omitted: 'complimentary' for complimentary intake, otherwise 'unpaid'
    payment_status: Optional[PaymentStatus] = None


class RegistrationUpdate(RegistrationBase):
    """Identity and survey corrections. Status fields are not editable here."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    payment_status: Optional[PaymentStatus] = None


class Registration(BaseModel):
    id: str
    ticket_number: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company_name: Optional[str] = None
    job_title: Optional[str] = None
    industry: Optional[str] = None
    country: Optional[str] = None
    age_range: Optional[str] = None
    gender: Optional[str] = None
    referral_source: Optional[str] = None
    registration_type: RegistrationType
    payment_status: PaymentStatus
    server_mode: Optional[str] = None
    badge_status: str
    ticket_status: str
    badge_print_count: int
    ticket_print_count: int
    confirmed: bool
    confirmed_by: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    registered_by: Optional[str] = None
    qr_asset_path: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RegistrationList(BaseModel):
    items: List[Registration]
    total: int


class QrRegenerationAccepted(BaseModel):
    ticket_number: str
    asset_path: str
    status: Literal["queued"] = "queued"
