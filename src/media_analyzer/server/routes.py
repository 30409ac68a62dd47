"""JSON API handlers.

Endpoints:
    GET  /api/health          - Liveness plus store and watcher state
    GET  /api/browse          - List one directory under the media root
    POST /api/analyze         - Probe files now, store and return records
    POST /api/analyze-all     - Probe every file under the root in batches
    POST /api/db/analyses     - Stored records for files, in request order
    GET  /api/db/dashboard    - Dashboard over stored records (by scope)
    GET  /api/search/options  - Distinct values of every search filter
    POST /api/search          - Metadata or name search
    POST /api/compare         - Compare two or more records

Blocking work (probing, SQLite, directory walks) runs in worker threads
via asyncio.to_thread so the event loop stays responsive.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import web

from media_analyzer import __version__
from media_analyzer.analysis import (
    analyze_all,
    analyze_and_store,
    compare_analyses,
    lookup_stored,
)
from media_analyzer.core import browse_directory
from media_analyzer.db import check_database_connectivity
from media_analyzer.domain import AnalysisRecord, record_from_dict
from media_analyzer.runtime import Runtime
from media_analyzer.search import (
    SCOPE_ALL,
    InvalidRequestError,
    SearchRequest,
    parse_non_negative_int,
)
from media_analyzer.server.errors import NOT_FOUND, api_error

logger = logging.getLogger(__name__)

FILES_REQUIRED = "files must be a non-empty array of relative paths"


def _runtime(request: web.Request) -> Runtime:
    return request.app["runtime"]


async def _read_json(request: web.Request) -> Any:
    """Parse the request body as JSON; an empty body reads as None.

    Raises:
        InvalidRequestError: If the body is not valid JSON.
    """
    if not request.can_read_body:
        return None
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidRequestError(f"Invalid JSON payload: {e}") from e


def _require_files(data: Any) -> list[str]:
    """Extract the ``files`` array of relative paths from a request body.

    Raises:
        InvalidRequestError: If ``files`` is missing, empty, or holds
            anything other than strings.
    """
    files = data.get("files") if isinstance(data, dict) else None
    if not isinstance(files, list) or not files:
        raise InvalidRequestError(FILES_REQUIRED)
    if not all(isinstance(p, str) for p in files):
        raise InvalidRequestError("files must be an array of strings")
    return files


async def health_handler(request: web.Request) -> web.Response:
    """Handle GET /api/health."""
    runtime = _runtime(request)
    watcher = request.app.get("watcher")
    db = runtime.store.describe()
    if db["enabled"]:
        db["connected"] = await asyncio.to_thread(
            check_database_connectivity, runtime.store.db_path
        )
    return web.json_response(
        {
            "ok": True,
            "version": __version__,
            "dbEnabled": db["enabled"],
            "db": db,
            "watcher": {"running": watcher is not None and watcher.is_running},
        }
    )


async def browse_handler(request: web.Request) -> web.Response:
    """Handle GET /api/browse.

    Query parameters:
        path: Directory relative to the media root (default: root)
        fileLimit: Page size for the file list (default: all files)
        fileOffset: Offset into the file list (default: 0)
    """
    runtime = _runtime(request)
    rel_path = request.query.get("path", "")
    file_limit = None
    if "fileLimit" in request.query:
        file_limit = parse_non_negative_int(request.query["fileLimit"], None)
    file_offset = parse_non_negative_int(request.query.get("fileOffset"), 0)

    try:
        listing = await asyncio.to_thread(
            browse_directory,
            runtime.media_root,
            rel_path,
            file_offset=file_offset,
            file_limit=file_limit,
        )
    except FileNotFoundError:
        return api_error(f"Directory not found: {rel_path!r}", code=NOT_FOUND)
    except NotADirectoryError:
        return api_error(f"Not a directory: {rel_path!r}", code=NOT_FOUND)
    return web.json_response({"mediaRoot": "/", **listing.to_dict()})


async def analyze_handler(request: web.Request) -> web.Response:
    """Handle POST /api/analyze with body ``{"files": [...]}``."""
    runtime = _runtime(request)
    files = _require_files(await _read_json(request))
    store = runtime.store if runtime.store.enabled else None

    result = await asyncio.to_thread(
        analyze_and_store, runtime.media_root, files, runtime.prober, store
    )
    return web.json_response(result.to_dict())


async def analyze_all_handler(request: web.Request) -> web.Response:
    """Handle POST /api/analyze-all.

    The request completes when every batch has been analyzed and stored;
    a client that disconnects early leaves the run going.
    """
    runtime = _runtime(request)
    result = await asyncio.to_thread(
        analyze_all,
        runtime.media_root,
        runtime.prober,
        runtime.store,
        batch_size=runtime.config.analyze.batch_size,
        guard=runtime.guard,
    )
    return web.json_response(result.to_dict())


async def db_analyses_handler(request: web.Request) -> web.Response:
    """Handle POST /api/db/analyses with body ``{"files": [...]}``."""
    runtime = _runtime(request)
    runtime.store.require()
    files = _require_files(await _read_json(request))

    result = await asyncio.to_thread(
        lookup_stored, runtime.media_root, files, runtime.store
    )
    return web.json_response(result.to_dict())


async def db_dashboard_handler(request: web.Request) -> web.Response:
    """Handle GET /api/db/dashboard.

    Query parameters:
        scope: "all" (default) or "current"
        basePath: Directory for the "current" scope
    """
    runtime = _runtime(request)
    runtime.store.require()
    prefix = runtime.search_engine().scope_prefix(
        request.query.get("scope", SCOPE_ALL), request.query.get("basePath", "")
    )

    dashboard = await asyncio.to_thread(runtime.store.aggregate, prefix)
    return web.json_response({"dashboard": dashboard.to_dict()})


async def search_options_handler(request: web.Request) -> web.Response:
    """Handle GET /api/search/options."""
    runtime = _runtime(request)
    options = await asyncio.to_thread(runtime.store.get_search_options)
    return web.json_response(options)


async def search_handler(request: web.Request) -> web.Response:
    """Handle POST /api/search.

    Body fields: kind, container, videoCodec, audioCodec, resolution, name,
    scope, basePath, limit, offset.
    """
    runtime = _runtime(request)
    search_request = SearchRequest.from_dict(await _read_json(request))

    result = await asyncio.to_thread(runtime.search_engine().search, search_request)
    return web.json_response(result.to_dict())


def _records_from_documents(documents: list[Any]) -> list[AnalysisRecord]:
    records = []
    for document in documents:
        if not isinstance(document, dict):
            raise InvalidRequestError("analyses must be an array of objects")
        try:
            records.append(record_from_dict(document))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidRequestError(f"Invalid analysis record: {e}") from e
    return records


async def compare_handler(request: web.Request) -> web.Response:
    """Handle POST /api/compare.

    Accepts either ``{"analyses": [record, ...]}`` with full records, or
    ``{"files": [...]}`` to compare the stored records of those files.
    Either way at least two items are required.
    """
    runtime = _runtime(request)
    data = await _read_json(request)
    if not isinstance(data, dict):
        raise InvalidRequestError("request body must be a JSON object")

    if "analyses" in data:
        documents = data["analyses"]
        if not isinstance(documents, list) or len(documents) < 2:
            raise InvalidRequestError(
                "analyses must be an array with at least 2 items"
            )
        records = _records_from_documents(documents)
    else:
        files = _require_files(data)
        lookup = await asyncio.to_thread(
            lookup_stored, runtime.media_root, files, runtime.store
        )
        records = [r for r in lookup.records if r.is_ok]
        if len(records) < 2:
            raise InvalidRequestError("at least 2 analyzed files are required")

    return web.json_response(compare_analyses(records).to_dict())


def get_api_routes() -> list[tuple[str, str, object]]:
    """Return API route definitions as (method, path, handler) tuples."""
    return [
        ("GET", "/api/health", health_handler),
        ("GET", "/api/browse", browse_handler),
        ("POST", "/api/analyze", analyze_handler),
        ("POST", "/api/analyze-all", analyze_all_handler),
        ("POST", "/api/db/analyses", db_analyses_handler),
        ("GET", "/api/db/dashboard", db_dashboard_handler),
        ("GET", "/api/search/options", search_options_handler),
        ("POST", "/api/search", search_handler),
        ("POST", "/api/compare", compare_handler),
    ]


def setup_api_routes(app: web.Application) -> None:
    """Register API routes with the application.

    Args:
        app: aiohttp Application to configure.
    """
    for method, path, handler in get_api_routes():
        app.router.add_route(method, path, handler)
