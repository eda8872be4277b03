# regdesk/models/server_mode.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from regdesk.db.base_class import Base


class ServerMode(Base):
    """Append-only log of server mode changes. The row with the highest id is current."""
    __tablename__ = "server_modes"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # onsite, online, both, deactivate
    mode = Column(String(20), nullable=False, index=True)
    activated_by = Column(String, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    activator = relationship("User", foreign_keys=[activated_by], lazy="joined")
