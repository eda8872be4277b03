# regdesk/api/v1/endpoints/users.py
import logging
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from regdesk.api import deps
from regdesk.core.permissions import Permission, SUPERADMIN_ROLE
from regdesk.crud.crud_role import role as role_crud
from regdesk.crud.crud_user import user as user_crud
from regdesk.db.session import get_db
from regdesk.middleware.error_handler import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from regdesk.models.role import Role
from regdesk.models.user import User
from regdesk.schemas.user import User as UserSchema, UserCreate, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = user_crud.get(db, id=user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found.", details={"user_id": user_id})
    return user


def _resolve_role(db: Session, name: str, current_user: User) -> Role:
    role = role_crud.get_by_name(db, name=name)
    if role is None:
        raise ValidationError({"role": [f"Unknown role '{name}'"]})
    # Only a superadmin can hand out the superadmin role
    if role.name == SUPERADMIN_ROLE and not current_user.is_superadmin:
        raise AuthorizationError("Only a superadmin can assign the superadmin role.")
    return role


def _ensure_email_free(db: Session, email: str, user_id: str = None) -> None:
    existing = user_crud.get_by_email(db, email=email)
    if existing and existing.id != user_id:
        raise ConflictError("The email has already been taken.", details={"field": "email"})


@router.get("", response_model=List[UserSchema])
def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.VIEW_USERS)),
):
    return user_crud.get_multi_ordered(db, skip=skip, limit=limit)


@router.post("", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.CREATE_USER)),
):
    role = _resolve_role(db, user_in.role, current_user)
    _ensure_email_free(db, user_in.email)
    user = user_crud.create_with_role(
        db,
        name=user_in.name,
        email=user_in.email,
        password=user_in.password,
        role=role,
        created_by=current_user.id,
    )
    logger.info(f"User {user.id} created with role '{role.name}' by {current_user.id}")
    return user


@router.get("/{user_id}", response_model=UserSchema)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.VIEW_USERS)),
):
    return _get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserSchema)
def update_user(
    user_id: str,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.EDIT_USER)),
):
    user = _get_user_or_404(db, user_id)
    if user.is_superadmin and not current_user.is_superadmin:
        raise AuthorizationError("The superadmin account can only be changed by a superadmin.")

    update_data = user_in.model_dump(exclude_unset=True)
    if user.is_superadmin and (
        update_data.get("is_active") is False
        or ("role" in update_data and update_data["role"] != SUPERADMIN_ROLE)
    ):
        raise AuthorizationError("The superadmin account cannot be disabled or demoted.")

    role_name = update_data.pop("role", None)
    if role_name:
        update_data["role_id"] = _resolve_role(db, role_name, current_user).id
    if update_data.get("email"):
        _ensure_email_free(db, update_data["email"], user_id=user.id)

    user = user_crud.update(db, db_obj=user, obj_in=update_data)
    # role_id changed underneath the joined relationship
    db.refresh(user)
    return user


@router.delete("/{user_id}", response_model=UserSchema)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_permission(Permission.DELETE_USER)),
):
    """Disable a user account. Accounts are never hard-deleted."""
    user = _get_user_or_404(db, user_id)
    if user.is_superadmin:
        raise AuthorizationError("The superadmin account cannot be deleted.")
    if user.id == current_user.id:
        raise ConflictError("You cannot disable your own account.")

    user = user_crud.disable(db, db_obj=user)
    logger.info(f"User {user.id} disabled by {current_user.id}")
    return user
