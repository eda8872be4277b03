# regdesk/crud/crud_server_mode.py
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from regdesk.models.server_mode import ServerMode


class CRUDServerMode:
    """The mode log is insert-only: there is no update or delete here."""

    def get_latest(self, db: Session) -> Optional[ServerMode]:
        return db.query(ServerMode).order_by(ServerMode.id.desc()).first()

    def create(self, db: Session, *, mode: str, activated_by: Optional[str]) -> ServerMode:
        db_obj = ServerMode(mode=mode, activated_by=activated_by)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_history(
        self, db: Session, *, skip: int = 0, limit: int = 15
    ) -> Tuple[List[ServerMode], int]:
        query = db.query(ServerMode)
        total = query.count()
        items = query.order_by(ServerMode.id.desc()).offset(skip).limit(limit).all()
        return items, total


server_mode = CRUDServerMode()
