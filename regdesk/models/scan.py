# regdesk/models/scan.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from regdesk.db.base_class import Base


class Scan(Base):
    """Append-only check-in audit record. Never updated or deleted by the service."""
    __tablename__ = "scans"
    __table_args__ = (
        Index("idx_scans_registration_scanned", "registration_id", "scanned_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    registration_id = Column(
        String, ForeignKey("registrations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scanned_by = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    scanned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    # Which credential the scan printed: 'badge' or 'ticket'
    target = Column(String(20), nullable=False, server_default="badge")

    # Snapshot of the registration's state when the ticket was presented
    badge_status_id = Column(Integer, ForeignKey("print_statuses.id"), nullable=True)
    ticket_status_id = Column(Integer, ForeignKey("print_statuses.id"), nullable=True)
    payment_status = Column(String(20), nullable=True)

    registration = relationship("Registration", back_populates="scans")
    badge_status_ref = relationship("PrintStatus", foreign_keys=[badge_status_id], lazy="joined")
    ticket_status_ref = relationship("PrintStatus", foreign_keys=[ticket_status_id], lazy="joined")

    @property
    def ticket_number(self) -> str:
        return self.registration.ticket_number

    @property
    def badge_status(self):
        return self.badge_status_ref.name if self.badge_status_ref else None

    @property
    def ticket_status(self):
        return self.ticket_status_ref.name if self.ticket_status_ref else None
