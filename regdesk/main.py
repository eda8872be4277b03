# regdesk/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from regdesk.api.v1.api import api_router
from regdesk.core.config import settings
from regdesk.core.limiter import limiter
from regdesk.middleware import (
    AppError,
    app_error_handler,
    database_error_handler,
    error_handler_middleware,
    rate_limit_error_handler,
    validation_error_handler,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Registration desk starting (env={settings.ENV})")
    yield
    logger.info("Registration desk shutting down")


app = FastAPI(
    title="Registration Desk Service",
    version="1.0.0",
    description="""
        Event registration and check-in API.

        ## Features

        * **Registration intake**: onsite kiosk, public online form, pre-registration, complimentary
        * **Ticket issuance**: unguessable ticket numbers, duplicate-person and email checks
        * **Badge assets**: QR codes generated synchronously or by the background worker
        * **Check-in**: scan audit trail, badge/ticket print status, reprint limits
        * **Server mode**: global switch deciding which intake channels are open

        ## Authentication

        Staff endpoints require a JWT via the `Authorization: Bearer <token>` header,
        obtained from `POST /api/v1/auth/login`.
        """,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(SQLAlchemyError, database_error_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Catch-all for errors no exception handler claims
app.middleware("http")(error_handler_middleware)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Registration Desk Service is running"}
