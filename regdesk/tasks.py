# regdesk/tasks.py
import logging

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from regdesk.worker import celery_app
from regdesk.db.session import SessionLocal
from regdesk.core.config import settings
from regdesk.core.storage import AssetStorageError, get_asset_store
from regdesk.crud.crud_registration import registration as registration_crud
from regdesk.services import badge_assets

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="regdesk.generate_badge_qr",
    autoretry_for=(AssetStorageError, OperationalError),
    retry_backoff=True,
    retry_backoff_max=settings.QR_RETRY_BACKOFF_MAX,
    retry_jitter=True,
    max_retries=settings.QR_GENERATION_MAX_RETRIES,
)
def generate_badge_qr(self, ticket_number: str):
    """
    Renders the QR badge asset for a ticket and records its path.

    Storage and database outages are retried with exponential backoff; an
    unknown ticket is not retried since no later attempt can succeed.
    """
    logger.info(
        f"Generating QR for ticket {ticket_number} (attempt {self.request.retries + 1})"
    )
    db: Session = SessionLocal()
    try:
        registration = registration_crud.get_by_ticket(db, ticket_number=ticket_number)
        if registration is None:
            logger.warning(f"QR generation skipped: ticket {ticket_number} not found")
            return None
        return badge_assets.generate_for_registration(db, get_asset_store(), registration)
    except (AssetStorageError, OperationalError) as exc:
        db.rollback()
        will_retry = self.request.retries < self.max_retries
        logger.error(
            f"QR generation failed for ticket {ticket_number}: {exc}"
            + (" (will retry)" if will_retry else " (giving up)")
        )
        raise
    finally:
        db.close()
