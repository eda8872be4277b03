# regdesk/crud/crud_role.py
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from regdesk.core.permissions import Permission
from regdesk.models.role import Role


class CRUDRole:
    def get_by_name(self, db: Session, *, name: str) -> Optional[Role]:
        return db.query(Role).filter(Role.name == name).first()

    def get_all(self, db: Session) -> List[Role]:
        return db.query(Role).order_by(Role.name).all()

    def ensure(
        self,
        db: Session,
        *,
        name: str,
        permissions: Iterable[Permission],
        description: Optional[str] = None,
    ) -> Role:
        """Get-or-create used by the seeder. Existing permission grants are left alone."""
        db_obj = self.get_by_name(db, name=name)
        if db_obj is None:
            db_obj = Role(
                name=name,
                description=description,
                permissions=sorted(p.value for p in permissions),
            )
            db.add(db_obj)
            db.flush()
        return db_obj


role = CRUDRole()
