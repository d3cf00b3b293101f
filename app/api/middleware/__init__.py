"""HTTP middleware: token authentication, error conversion and access logging."""

from app.api.middleware.access_log import access_log_middleware
from app.api.middleware.auth import (
    ACCESS_TOKEN_HEADER,
    EXPOSED_TOKEN_HEADERS,
    REFRESH_TOKEN_HEADER,
    TokenAuthMiddleware,
)
from app.api.middleware.errors import (
    api_error_handler,
    error_handler_middleware,
    request_validation_error_handler,
)

__all__ = [
    "ACCESS_TOKEN_HEADER",
    "EXPOSED_TOKEN_HEADERS",
    "REFRESH_TOKEN_HEADER",
    "TokenAuthMiddleware",
    "access_log_middleware",
    "api_error_handler",
    "error_handler_middleware",
    "request_validation_error_handler",
]
