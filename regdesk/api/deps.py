# regdesk/api/deps.py
from typing import Callable, Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from regdesk.core.config import settings
from regdesk.core.permissions import Permission
from regdesk.core.security import JWT_ALGORITHM
from regdesk.crud.crud_user import user as user_crud
from regdesk.db.session import get_db
from regdesk.middleware.error_handler import AuthenticationError, AuthorizationError
from regdesk.models.user import User
from regdesk.schemas.token import TokenPayload


# This tells FastAPI where to look for the token (used by the OpenAPI docs).
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")
# Optional version that doesn't raise an error when token is missing
oauth2_scheme_optional = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login", auto_error=False
)


def _decode_token(token: str) -> TokenPayload:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise AuthenticationError()


def _load_active_user(db: Session, token_data: TokenPayload) -> User:
    user = user_crud.get(db, id=token_data.sub)
    if user is None or not user.is_active:
        raise AuthenticationError()
    return user


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> User:
    if not token:
        raise AuthenticationError("Not authenticated")
    return _load_active_user(db, _decode_token(token))


def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    Anonymous callers get None. A token that is present but invalid is still
    rejected, so a stale staff session is not silently treated as the public.
    """
    if not token:
        return None
    return _load_active_user(db, _decode_token(token))


def require_permission(permission: Permission) -> Callable[..., User]:
    """Dependency factory: the current user must hold ``permission`` (superadmin always does)."""

    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.role or not current_user.role.allows(permission):
            raise AuthorizationError(details={"permission": permission.value})
        return current_user

    return _checker
