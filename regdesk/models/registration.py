# regdesk/models/registration.py
import uuid
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
    false,
)
from sqlalchemy.orm import relationship
from regdesk.db.base_class import Base
from regdesk.db.types import EncryptedString


class Registration(Base):
    __tablename__ = "registrations"

    id = Column(
        String, primary_key=True, default=lambda: f"reg_{uuid.uuid4().hex[:12]}"
    )

    # Unguessable UUID4 issued once at intake; used for every later lookup
    ticket_number = Column(String(36), nullable=False, unique=True, index=True)

    # Identity (encrypted at rest)
    first_name = Column(EncryptedString, nullable=False)
    last_name = Column(EncryptedString, nullable=False)
    email = Column(EncryptedString, nullable=True)
    phone = Column(EncryptedString, nullable=True)
    address = Column(EncryptedString, nullable=True)
    company_name = Column(EncryptedString, nullable=True)

    # Keyed hashes of the normalized values; the unique constraints arbitrate races
    email_hash = Column(String(64), nullable=True, unique=True, index=True)
    identity_hash = Column(String(64), nullable=False, unique=True, index=True)
    # Normalized first|last only; not unique since kiosk channels also compare company
    name_hash = Column(String(64), nullable=True, index=True)

    # Survey fields, plain text for aggregate reporting
    job_title = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)
    country = Column(String(100), nullable=True)
    age_range = Column(String(50), nullable=True)
    gender = Column(String(50), nullable=True)
    referral_source = Column(String(255), nullable=True)

    # onsite, online, pre-registered, complimentary
    registration_type = Column(String(20), nullable=False, index=True)
    # paid, unpaid, complimentary
    payment_status = Column(String(20), nullable=False, server_default="unpaid")
    # Mode in force when the registration was taken
    server_mode = Column(String(20), nullable=True)

    badge_status_id = Column(Integer, ForeignKey("print_statuses.id"), nullable=False)
    ticket_status_id = Column(Integer, ForeignKey("print_statuses.id"), nullable=False)
    badge_print_count = Column(Integer, nullable=False, default=0, server_default="0")
    ticket_print_count = Column(Integer, nullable=False, default=0, server_default="0")

    confirmed = Column(Boolean, nullable=False, default=False, server_default=false())
    confirmed_by = Column(String, ForeignKey("users.id"), nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)

    registered_by = Column(String, ForeignKey("users.id"), nullable=True, index=True)

    qr_asset_path = Column(String(255), nullable=True)

    # Client-supplied key; a retried intake with the same key returns this row
    idempotency_key = Column(String(255), nullable=True, unique=True, index=True)
    # Caller and request body the key was first used with
    request_hash = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    badge_status_ref = relationship("PrintStatus", foreign_keys=[badge_status_id], lazy="joined")
    ticket_status_ref = relationship("PrintStatus", foreign_keys=[ticket_status_id], lazy="joined")
    scans = relationship(
        "Scan",
        back_populates="registration",
        order_by="Scan.id",
        cascade="all, delete-orphan",
    )

    @property
    def badge_status(self) -> str:
        return self.badge_status_ref.name if self.badge_status_ref else None

    @property
    def ticket_status(self) -> str:
        return self.ticket_status_ref.name if self.ticket_status_ref else None
