"""HTTP access logging: one line per request on the app.access logger."""

import logging
import time

from fastapi import Request

from app.core.log_config import ACCESS_LOGGER_NAME

logger = logging.getLogger(ACCESS_LOGGER_NAME)


async def access_log_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    client = request.client.host if request.client else "-"
    logger.info(
        '%s "%s %s HTTP/%s" %s %.1fms',
        client,
        request.method,
        request.url.path,
        request.scope.get("http_version", "1.1"),
        response.status_code,
        elapsed_ms,
    )
    return response
