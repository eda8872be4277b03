# regdesk/crud/crud_user.py
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from .base import CRUDBase
from regdesk.core.security import hash_password, verify_password
from regdesk.models.role import Role
from regdesk.models.user import User
from regdesk.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return (
            db.query(self.model)
            .filter(func.lower(self.model.email) == email.strip().lower())
            .first()
        )

    def get_multi_ordered(
        self, db: Session, *, skip: int = 0, limit: int = 100
    ) -> List[User]:
        return (
            db.query(self.model)
            .order_by(self.model.created_at, self.model.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def authenticate(self, db: Session, *, email: str, password: str) -> Optional[User]:
        """Returns the active user whose password matches, else None."""
        user = self.get_by_email(db, email=email)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def create_with_role(
        self,
        db: Session,
        *,
        name: str,
        email: str,
        password: str,
        role: Role,
        created_by: Optional[str] = None,
    ) -> User:
        db_obj = self.model(
            name=name,
            email=email.strip().lower(),
            password_hash=hash_password(password),
            role_id=role.id,
            created_by=created_by,
            is_active=True,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: User,
        obj_in: Union[UserUpdate, Dict[str, Any]],
    ) -> User:
        if isinstance(obj_in, dict):
            update_data = dict(obj_in)
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        # Passwords are only ever stored hashed
        password = update_data.pop("password", None)
        if password:
            update_data["password_hash"] = hash_password(password)
        if update_data.get("email"):
            update_data["email"] = update_data["email"].strip().lower()
        return super().update(db, db_obj=db_obj, obj_in=update_data)

    def disable(self, db: Session, *, db_obj: User) -> User:
        db_obj.is_active = False
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


user = CRUDUser(User)
