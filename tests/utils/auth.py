from sqlalchemy.orm import Session

from regdesk.core.config import settings
from regdesk.core.security import create_access_token
from regdesk.crud.crud_role import role as role_crud
from regdesk.crud.crud_user import user as user_crud
from regdesk.models.user import User

TEST_PASSWORD = "correct-horse-battery"


def get_superadmin(db: Session) -> User:
    return user_crud.get_by_email(db, email=settings.SUPERADMIN_EMAIL)


def create_staff_user(
    db: Session, role_name: str = "admin", email: str = "staff@regdesk.io", name: str = "Desk Staff"
) -> User:
    role = role_crud.get_by_name(db, name=role_name)
    return user_crud.create_with_role(
        db, name=name, email=email, password=TEST_PASSWORD, role=role
    )


def auth_headers(user: User) -> dict[str, str]:
    """
    Generates a valid JWT token and authentication headers for a test user.
    """
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}
