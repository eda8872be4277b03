# regdesk/api/v1/api.py

from fastapi import APIRouter
from regdesk.api.v1.endpoints import (
    assets,
    auth,
    health,
    print_statuses,
    registrations,
    server_mode,
    users,
)

# This is the main router for the v1 API.
# It will include all the specific endpoint routers.
api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(registrations.router)
api_router.include_router(assets.router)
api_router.include_router(server_mode.router)
api_router.include_router(print_statuses.router)
api_router.include_router(users.router)
api_router.include_router(health.router)
