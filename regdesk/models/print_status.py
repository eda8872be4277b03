# regdesk/models/print_status.py
from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint, true
from regdesk.db.base_class import Base


class PrintStatus(Base):
    """Lookup row for badge/ticket print states. Seeded, near-static reference data."""
    __tablename__ = "print_statuses"
    __table_args__ = (UniqueConstraint("type", "name", name="uq_print_status_type_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)

    # 'badge' or 'ticket'
    type = Column(String(20), nullable=False, index=True)
    # not_printed, queued, printing, printed, reprinted, failed
    name = Column(String(50), nullable=False)
    description = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True, server_default=true())
