"""Request middlewares for the JSON API."""

from __future__ import annotations

import logging
import time

from aiohttp import web

from media_analyzer.server.errors import (
    INTERNAL_ERROR,
    api_error,
    client_error_response,
)

logger = logging.getLogger(__name__)


@web.middleware
async def error_middleware(
    request: web.Request,
    handler: web.RequestHandler,
) -> web.StreamResponse:
    """Map request-level failures to JSON error responses.

    Path escapes, malformed requests and a disabled store are the caller's
    problem (400). Anything else unexpected is logged and reported as 500.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        response = client_error_response(e)
        if response is None:
            logger.exception("Unhandled error for %s %s", request.method, request.path)
            response = api_error(
                "Internal server error", code=INTERNAL_ERROR, status=500
            )
        return response


@web.middleware
async def request_logging_middleware(
    request: web.Request,
    handler: web.RequestHandler,
) -> web.StreamResponse:
    """Log request details with timing."""
    start_time = time.monotonic()

    try:
        response = await handler(request)
    except web.HTTPException as exc:
        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "API request: method=%s path=%s status=%d duration_ms=%.1f",
            request.method,
            request.path,
            exc.status,
            duration_ms,
        )
        raise

    duration_ms = (time.monotonic() - start_time) * 1000
    if request.path != "/api/health":
        logger.info(
            "API request: method=%s path=%s status=%d duration_ms=%.1f",
            request.method,
            request.path,
            response.status,
            duration_ms,
        )
    return response
