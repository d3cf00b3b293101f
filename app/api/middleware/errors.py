"""
Error conversion: ApiError subclasses render as {"error": ...} with their status;
anything unexpected is logged and becomes a generic 500.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import ApiError
from app.core.validation import format_errors

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server failed to process your request(s) please try again"


def api_error_response(exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return api_error_response(exc)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI query/path validation failures in the same shape as body violations."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": format_errors(exc.errors())},
    )


async def error_handler_middleware(request: Request, call_next):
    """Outermost safety net; the original error is logged, never returned to the client."""
    try:
        return await call_next(request)
    except ApiError as e:
        return api_error_response(e)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": SERVER_ERROR_MESSAGE},
        )
