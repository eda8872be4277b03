# regdesk/services/badge_assets.py
"""
Badge asset generator.

Each ticket has one QR image at a path derived from the ticket number alone,
so generating twice overwrites the same object with identical content.
"""

import io
import logging
from typing import Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_H
from sqlalchemy.orm import Session

from regdesk.core.config import settings
from regdesk.crud.crud_registration import registration as registration_crud
from regdesk.models.registration import Registration

logger = logging.getLogger(__name__)

ASSET_PREFIX = "qrcodes"


def asset_path_for(ticket_number: str) -> str:
    return f"{ASSET_PREFIX}/{ticket_number}.png"


def qr_content_for(ticket_number: str) -> str:
    return settings.QR_CONTENT_TEMPLATE.format(ticket_number=ticket_number)


def render_qr_png(content: str) -> bytes:
    """Encode ``content`` as a PNG QR code with high error correction for print damage."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=settings.QR_BOX_SIZE,
        border=settings.QR_BORDER,
    )
    qr.add_data(content)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def generate(store, ticket_number: str, content: Optional[str] = None) -> str:
    """Render and store the QR image for a ticket. Returns the asset path."""
    path = asset_path_for(ticket_number)
    data = render_qr_png(content if content is not None else qr_content_for(ticket_number))
    store.save(path, data, content_type="image/png")
    logger.info(f"QR code generated for ticket {ticket_number} at {path}")
    return path


def generate_for_registration(db: Session, store, registration: Registration) -> str:
    path = generate(store, registration.ticket_number)
    if registration.qr_asset_path != path:
        registration_crud.set_asset_path(db, db_obj=registration, path=path)
    return path


def enqueue(ticket_number: str) -> bool:
    """
    Hands generation to the background worker. Returns False if the broker
    could not be reached; intake does not depend on this succeeding.
    """
    # Imported here so the API process only touches Celery when dispatching
    from regdesk.tasks import generate_badge_qr

    try:
        generate_badge_qr.delay(ticket_number)
    except Exception as exc:
        logger.error(f"Could not enqueue QR generation for ticket {ticket_number}: {exc}")
        return False
    logger.info(f"QR generation enqueued for ticket {ticket_number}")
    return True
