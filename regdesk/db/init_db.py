# regdesk/db/init_db.py
"""
Reference data seeding.

Creates the print statuses, default roles, the superadmin account and the
initial server mode. Safe to run repeatedly: existing rows are left alone.

    python -m regdesk.db.init_db            # seed
    python -m regdesk.db.init_db --reset    # also clear registrations and scans
"""

import argparse
import logging

from sqlalchemy.orm import Session

from regdesk.core.config import settings
from regdesk.core.permissions import DEFAULT_ROLES, SUPERADMIN_ROLE
from regdesk.crud.crud_print_status import print_status as print_status_crud
from regdesk.crud.crud_role import role as role_crud
from regdesk.crud.crud_server_mode import server_mode as server_mode_crud
from regdesk.crud.crud_user import user as user_crud
from regdesk.models.registration import Registration
from regdesk.models.scan import Scan

logger = logging.getLogger(__name__)

PRINT_STATUS_TYPES = ("badge", "ticket")

PRINT_STATUS_DESCRIPTIONS = {
    "not_printed": "Not yet printed",
    "queued": "Waiting in the print queue",
    "printing": "Currently printing",
    "printed": "Printed",
    "reprinted": "Printed again",
    "failed": "Printing failed",
}


def seed_print_statuses(db: Session) -> None:
    for status_type in PRINT_STATUS_TYPES:
        for name, description in PRINT_STATUS_DESCRIPTIONS.items():
            print_status_crud.ensure(
                db,
                type=status_type,
                name=name,
                description=f"{status_type.capitalize()} {description.lower()}",
            )
    db.commit()


def seed_roles(db: Session) -> None:
    for name, definition in DEFAULT_ROLES.items():
        role_crud.ensure(
            db,
            name=name,
            permissions=definition["permissions"],
            description=definition["description"],
        )
    db.commit()


def seed_superadmin(db: Session) -> None:
    if user_crud.get_by_email(db, email=settings.SUPERADMIN_EMAIL):
        return
    role = role_crud.get_by_name(db, name=SUPERADMIN_ROLE)
    user_crud.create_with_role(
        db,
        name=settings.SUPERADMIN_NAME,
        email=settings.SUPERADMIN_EMAIL,
        password=settings.SUPERADMIN_PASSWORD,
        role=role,
    )
    logger.info(f"Superadmin account created for {settings.SUPERADMIN_EMAIL}")


def seed_server_mode(db: Session) -> None:
    if server_mode_crud.get_latest(db) is None:
        server_mode_crud.create(db, mode=settings.INITIAL_SERVER_MODE, activated_by=None)
        logger.info(f"Initial server mode set to '{settings.INITIAL_SERVER_MODE}'")


def init_db(db: Session) -> None:
    seed_print_statuses(db)
    seed_roles(db)
    seed_superadmin(db)
    seed_server_mode(db)


def reset_registrations(db: Session) -> int:
    """Removes every scan and registration, e.g. between events. Returns the number removed."""
    db.query(Scan).delete(synchronize_session=False)
    removed = db.query(Registration).delete(synchronize_session=False)
    db.commit()
    logger.warning(f"Event reset: {removed} registrations removed")
    return removed


def main() -> None:
    from regdesk.db.session import SessionLocal

    parser = argparse.ArgumentParser(description="Seed registration desk reference data")
    parser.add_argument("--reset", action="store_true", help="clear registrations and scans")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        init_db(db)
        if args.reset:
            reset_registrations(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
