# regdesk/models/user.py
import uuid
from sqlalchemy import Boolean, Column, String, DateTime, ForeignKey, func, true
from sqlalchemy.orm import relationship
from regdesk.db.base_class import Base


class User(Base):
    """Staff account. Belongs to exactly one role; disabled rather than deleted."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: f"usr_{uuid.uuid4().hex[:12]}")
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    role_id = Column(String, ForeignKey("roles.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())

    created_by = Column(String, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    role = relationship("Role", back_populates="users", lazy="joined")

    @property
    def is_superadmin(self) -> bool:
        return self.role is not None and self.role.is_superadmin

    @property
    def permissions(self) -> list:
        if self.role is None:
            return []
        return sorted(p.value for p in self.role.permission_set)

    @property
    def role_name(self) -> str:
        return self.role.name if self.role is not None else ""
