# regdesk/api/v1/endpoints/assets.py
import uuid

from fastapi import APIRouter, Depends, Response

from regdesk.core.storage import AssetNotFound, AssetStorageError, get_asset_store
from regdesk.middleware.error_handler import NotFoundError, ServiceUnavailable
from regdesk.services import badge_assets

router = APIRouter(prefix="/assets", tags=["Assets"])


@router.get("/{ticket_number}.png")
def get_badge_qr(ticket_number: str, store=Depends(get_asset_store)):
    """
    Serve the QR image for a ticket. 404 means generation is still pending;
    clients poll with backoff.
    """
    try:
        uuid.UUID(ticket_number)
    except ValueError:
        raise NotFoundError("Unknown asset.", details={"ticket_number": ticket_number})

    try:
        data = store.read(badge_assets.asset_path_for(ticket_number))
    except AssetNotFound:
        raise NotFoundError(
            "QR code has not been generated yet.",
            details={"ticket_number": ticket_number, "status": "pending"},
        )
    except AssetStorageError:
        raise ServiceUnavailable("Asset store unavailable.", service="asset_store", retry_after=5)

    return Response(content=data, media_type="image/png", headers={"Cache-Control": "no-cache"})
