"""API error bodies: ``{"error": <message>, "code": <CODE>}``."""

from __future__ import annotations

from aiohttp import web

from media_analyzer.core import PathEscapeError
from media_analyzer.db import StoreUnavailableError
from media_analyzer.search import InvalidRequestError

INVALID_REQUEST = "INVALID_REQUEST"
PATH_OUTSIDE_ROOT = "PATH_OUTSIDE_ROOT"
NOT_FOUND = "NOT_FOUND"
DATABASE_UNAVAILABLE = "DATABASE_UNAVAILABLE"
INTERNAL_ERROR = "INTERNAL_ERROR"

# Failures caused by the request itself, reported as 400
_CLIENT_ERRORS: tuple[tuple[type[Exception], str], ...] = (
    (PathEscapeError, PATH_OUTSIDE_ROOT),
    (InvalidRequestError, INVALID_REQUEST),
    (StoreUnavailableError, DATABASE_UNAVAILABLE),
)


def api_error(message: str, *, code: str, status: int = 400) -> web.Response:
    return web.json_response({"error": message, "code": code}, status=status)


def client_error_response(exc: Exception) -> web.Response | None:
    """Return the 400 response for a request-level exception.

    None means ``exc`` is unexpected and should become a 500.
    """
    for exc_type, code in _CLIENT_ERRORS:
        if isinstance(exc, exc_type):
            return api_error(str(exc), code=code)
    return None
