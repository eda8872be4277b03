# regdesk/models/role.py
import uuid
from sqlalchemy import Column, String, DateTime, JSON, func
from sqlalchemy.orm import relationship
from regdesk.db.base_class import Base
from regdesk.core.permissions import Permission, SUPERADMIN_ROLE, parse_permissions


class Role(Base):
    __tablename__ = "roles"

    id = Column(String, primary_key=True, default=lambda: f"role_{uuid.uuid4().hex[:12]}")
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(String(255), nullable=True)

    # List of Permission values
    permissions = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    users = relationship("User", back_populates="role")

    @property
    def is_superadmin(self) -> bool:
        return self.name == SUPERADMIN_ROLE

    @property
    def permission_set(self) -> frozenset:
        return parse_permissions(self.permissions)

    def allows(self, permission: Permission) -> bool:
        """Superadmin bypasses every check; other roles need the explicit grant."""
        return self.is_superadmin or permission in self.permission_set
