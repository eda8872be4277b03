# regdesk/crud/crud_print_status.py
from typing import List, Optional

from sqlalchemy.orm import Session

from regdesk.models.print_status import PrintStatus


class CRUDPrintStatus:
    def get(self, db: Session, status_id: int) -> Optional[PrintStatus]:
        return db.query(PrintStatus).filter(PrintStatus.id == status_id).first()

    def get_by_name(
        self, db: Session, *, type: str, name: str, active_only: bool = True
    ) -> Optional[PrintStatus]:
        query = db.query(PrintStatus).filter(
            PrintStatus.type == type, PrintStatus.name == name
        )
        if active_only:
            query = query.filter(PrintStatus.active.is_(True))
        return query.first()

    def get_all(self, db: Session, *, type: Optional[str] = None) -> List[PrintStatus]:
        query = db.query(PrintStatus)
        if type:
            query = query.filter(PrintStatus.type == type)
        return query.order_by(PrintStatus.type, PrintStatus.id).all()

    def ensure(
        self, db: Session, *, type: str, name: str, description: Optional[str] = None
    ) -> PrintStatus:
        """Get-or-create used by the reference-data seeder."""
        db_obj = self.get_by_name(db, type=type, name=name, active_only=False)
        if db_obj is None:
            db_obj = PrintStatus(type=type, name=name, description=description, active=True)
            db.add(db_obj)
            db.flush()
        return db_obj


print_status = CRUDPrintStatus()
