# regdesk/crud/crud_scan.py
from typing import List, Optional

from sqlalchemy.orm import Session

from regdesk.models.registration import Registration
from regdesk.models.scan import Scan


class CRUDScan:
    """Append-only access to the check-in audit trail."""

    def record(
        self,
        db: Session,
        *,
        registration: Registration,
        scanned_by: Optional[str],
        target: str,
    ) -> Scan:
        """
        Adds a Scan row snapshotting the registration's current statuses.
        The caller owns the transaction; nothing is committed here.
        """
        db_obj = Scan(
            registration_id=registration.id,
            scanned_by=scanned_by,
            target=target,
            badge_status_id=registration.badge_status_id,
            ticket_status_id=registration.ticket_status_id,
            payment_status=registration.payment_status,
        )
        db.add(db_obj)
        return db_obj

    def get_by_registration(self, db: Session, *, registration_id: str) -> List[Scan]:
        return (
            db.query(Scan)
            .filter(Scan.registration_id == registration_id)
            .order_by(Scan.id)
            .all()
        )

    def count_by_registration(self, db: Session, *, registration_id: str) -> int:
        return db.query(Scan).filter(Scan.registration_id == registration_id).count()


scan = CRUDScan()
