# regdesk/api/v1/endpoints/auth.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from regdesk.api import deps
from regdesk.core.security import create_access_token
from regdesk.crud.crud_user import user as user_crud
from regdesk.db.session import get_db
from regdesk.middleware.error_handler import AuthenticationError
from regdesk.models.user import User
from regdesk.schemas.token import LoginRequest, Token
from regdesk.schemas.user import User as UserSchema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = user_crud.authenticate(db, email=credentials.email, password=credentials.password)
    if not user:
        logger.warning("Failed login attempt")
        raise AuthenticationError("Invalid credentials")
    logger.info(f"User {user.id} logged in")
    return {"access_token": create_access_token(user.id), "token_type": "bearer"}


@router.get("/me", response_model=UserSchema)
def read_current_user(current_user: User = Depends(deps.get_current_user)):
    return current_user
