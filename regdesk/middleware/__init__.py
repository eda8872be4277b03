"""Middleware module"""

from regdesk.middleware.error_handler import (
    app_error_handler,
    error_handler_middleware,
    handle_unexpected_error,
    validation_error_handler,
    database_error_handler,
    rate_limit_error_handler,
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationMissing,
    ConflictError,
    ErrorCategory,
    NotFoundError,
    ServiceUnavailable,
    ValidationError,
)

__all__ = [
    "app_error_handler",
    "error_handler_middleware",
    "handle_unexpected_error",
    "validation_error_handler",
    "database_error_handler",
    "rate_limit_error_handler",
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationMissing",
    "ConflictError",
    "ErrorCategory",
    "NotFoundError",
    "ServiceUnavailable",
    "ValidationError",
]
