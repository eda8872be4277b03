"""
Error taxonomy and exception handlers.

Every failure leaves the service as a structured body:

    {"error": {"category": ..., "message": ..., "timestamp": ..., "path": ..., ...details}}

Client errors (validation, conflict, not found, auth, missing configuration) are
never retried by the service. Infrastructure errors map to 503 with Retry-After
so callers know the request may be repeated.
"""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorCategory:
    """Error categories for structured error handling"""
    VALIDATION = "validation_error"
    CONFLICT = "conflict_error"
    NOT_FOUND = "not_found_error"
    AUTHENTICATION = "authentication_error"
    AUTHORIZATION = "authorization_error"
    CONFIGURATION_MISSING = "configuration_missing"
    SERVICE_UNAVAILABLE = "service_unavailable"
    RATE_LIMIT = "rate_limit_error"
    DATABASE = "database_error"
    INTERNAL = "internal_error"


class AppError(Exception):
    """Base application error with structured information"""

    def __init__(
        self,
        message: str,
        category: str = ErrorCategory.INTERNAL,
        status_code: int = 500,
        details: Optional[dict] = None,
        retry_after: Optional[int] = None,
    ):
        self.message = message
        self.category = category
        self.status_code = status_code
        self.details = details or {}
        self.retry_after = retry_after
        super().__init__(self.message)


class ValidationError(AppError):
    """Input must be corrected by the client. All violated fields are reported together."""

    def __init__(self, fields: Dict[str, List[str]], message: str = "Validation failed"):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"fields": fields},
        )
        self.fields = fields


class ConflictError(AppError):
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFLICT,
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class NotFoundError(AppError):
    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.NOT_FOUND,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class AuthenticationError(AppError):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHENTICATION,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class AuthorizationError(AppError):
    """Wrong role/permission, or the current server mode forbids the action."""

    def __init__(self, message: str = "This action is unauthorized.", details: Optional[dict] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHORIZATION,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class ConfigurationMissing(AppError):
    """Required reference data (server mode, print statuses) is absent."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION_MISSING,
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class ServiceUnavailable(AppError):
    """Datastore or asset store unreachable. Transient; the caller may retry."""

    def __init__(self, message: str, service: str, retry_after: int = 30):
        super().__init__(
            message=message,
            category=ErrorCategory.SERVICE_UNAVAILABLE,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"service": service},
            retry_after=retry_after,
        )


def _error_body(request: Request, category: str, message: str, **extra) -> dict:
    return {
        "error": {
            "category": category,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            **extra,
        }
    }


async def error_handler_middleware(request: Request, call_next: Callable) -> Response:
    """
    Global error handling middleware.

    Typed errors are turned into responses by the exception handlers below;
    anything that still escapes the route becomes a structured 500.
    """
    try:
        return await call_next(request)
    except Exception as e:
        return handle_unexpected_error(e, request)


def handle_app_error(error: AppError, request: Request) -> JSONResponse:
    """Handle structured application errors"""
    log = logger.warning if error.status_code < 500 else logger.error
    log(
        f"{error.category} on {request.method} {request.url.path}: {error.message}",
        extra={"category": error.category, "status_code": error.status_code},
    )

    headers = {}
    if error.retry_after:
        headers["Retry-After"] = str(error.retry_after)

    return JSONResponse(
        status_code=error.status_code,
        content=_error_body(request, error.category, error.message, **error.details),
        headers=headers,
    )


def handle_unexpected_error(error: Exception, request: Request) -> JSONResponse:
    """Handle unexpected errors"""
    logger.critical(
        f"Unexpected error: {type(error).__name__}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=error,
    )

    # Internal details stay in the log
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            request,
            ErrorCategory.INTERNAL,
            "An unexpected error occurred.",
            error_id=datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S"),
        ),
    )


def validation_fields(errors: List[dict]) -> Dict[str, List[str]]:
    """Group pydantic error dicts by field name (location without the 'body' prefix)."""
    fields: Dict[str, List[str]] = defaultdict(list)
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body",)]
        field = ".".join(loc) or "__root__"
        fields[field].append(err.get("msg", "Invalid value"))
    return dict(fields)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """FastAPI exception handler for AppError"""
    return handle_app_error(exc, request)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """FastAPI exception handler for request validation errors"""
    return handle_app_error(ValidationError(validation_fields(exc.errors())), request)


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Connection failures are transient (503); anything else is a server bug (500)."""
    if isinstance(exc, OperationalError):
        logger.error(f"Database unavailable: {exc}", exc_info=True)
        return handle_app_error(
            ServiceUnavailable("Database connection failed. Please try again.", service="database"),
            request,
        )

    logger.error(f"Database error: {type(exc).__name__}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=_error_body(
            request,
            ErrorCategory.DATABASE,
            "Database operation failed.",
            type=type(exc).__name__,
        ),
    )


async def rate_limit_error_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=_error_body(
            request, ErrorCategory.RATE_LIMIT, f"Rate limit exceeded: {exc.detail}"
        ),
        headers={"Retry-After": "60"},
    )
