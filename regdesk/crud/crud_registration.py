# regdesk/crud/crud_registration.py
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .base import CRUDBase
from regdesk.core.security import email_lookup_hash
from regdesk.models.registration import Registration
from regdesk.schemas.registration import RegistrationCreate, RegistrationUpdate


class CRUDRegistration(CRUDBase[Registration, RegistrationCreate, RegistrationUpdate]):
    def get_by_ticket(
        self, db: Session, *, ticket_number: str, for_update: bool = False
    ) -> Optional[Registration]:
        """
        Fetches a registration by its ticket number. With ``for_update`` the row
        is locked until the transaction ends, serializing concurrent scans.
        """
        query = db.query(self.model).filter(self.model.ticket_number == ticket_number)
        if for_update:
            query = query.with_for_update(of=self.model)
        return query.first()

    def get_by_idempotency_key(self, db: Session, *, key: str) -> Optional[Registration]:
        return db.query(self.model).filter(self.model.idempotency_key == key).first()

    def get_by_email_hash(self, db: Session, *, email_hash: str) -> Optional[Registration]:
        return db.query(self.model).filter(self.model.email_hash == email_hash).first()

    def get_by_identity_hash(
        self, db: Session, *, identity_hash: str
    ) -> Optional[Registration]:
        return (
            db.query(self.model).filter(self.model.identity_hash == identity_hash).first()
        )

    def get_by_name_hash(
        self, db: Session, *, name_hash: str, exclude_id: Optional[str] = None
    ) -> Optional[Registration]:
        query = db.query(self.model).filter(self.model.name_hash == name_hash)
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        return query.first()

    def get_multi_filtered(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        registration_type: Optional[str] = None,
        confirmed: Optional[bool] = None,
    ) -> Tuple[List[Registration], int]:
        """
        Lists registrations newest first.

        Identity columns are encrypted, so ``search`` matches the ticket number
        (substring) or an exact email through its lookup hash.
        """
        query = db.query(self.model)

        if search:
            conditions = [self.model.ticket_number.ilike(f"%{search.strip()}%")]
            email_hash = email_lookup_hash(search)
            if email_hash:
                conditions.append(self.model.email_hash == email_hash)
            query = query.filter(or_(*conditions))
        if registration_type:
            query = query.filter(self.model.registration_type == registration_type)
        if confirmed is not None:
            query = query.filter(self.model.confirmed == confirmed)

        total = query.count()
        items = (
            query.order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    def create_from_data(self, db: Session, *, data: Dict[str, Any]) -> Registration:
        """
        Inserts a fully prepared registration. Unique-constraint violations
        surface as IntegrityError for the caller to translate.
        """
        db_obj = self.model(**data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def set_asset_path(self, db: Session, *, db_obj: Registration, path: str) -> Registration:
        db_obj.qr_asset_path = path
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


registration = CRUDRegistration(Registration)
