# ============================================================================
# API ROUTES
# ============================================================================
# STATUS: Core - FastAPI route definitions
# PURPOSE: HTTP endpoints for catalog listing and database download
# CREATED: 09 OCT 2026
# ============================================================================
"""
API Routes

FastAPI routes for the catalog service.

Endpoints are plain `def` so FastAPI runs each request on a threadpool
worker; backends are blocking.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response, StreamingResponse

from __version__ import __version__, BUILD_DATE
from backends.base import StorageBackend
from core.errors import AccessDenied, NotFound, StorageError
from core.logging import ComponentType, get_logger, log_context
from .schemas import (
    CacheInvalidateResponse,
    HealthResponse,
    LivenessResponse,
)

logger = get_logger(__name__, ComponentType.API)

router = APIRouter()

JSONL_MEDIA_TYPE = "application/x-ndjson"


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================
# Set by the main app at startup

_backend: Optional[StorageBackend] = None


def set_backend(backend: Optional[StorageBackend]) -> None:
    """Set the backend instance for dependency injection."""
    global _backend
    _backend = backend


def get_backend() -> StorageBackend:
    if _backend is None:
        raise HTTPException(500, "Storage backend not initialized")
    return _backend


def _http_error(error: StorageError) -> HTTPException:
    """Map a storage failure onto an HTTP status."""
    if isinstance(error, AccessDenied):
        return HTTPException(403, str(error))
    if isinstance(error, NotFound):
        return HTTPException(404, str(error))
    logger.error(f"Storage error: {error}")
    return HTTPException(500, str(error))


# ============================================================================
# HEALTH
# ============================================================================

@router.get("/livez", response_model=LivenessResponse, tags=["Health"])
def liveness_probe():
    """Returns 200 while the process is alive. No backend access."""
    return LivenessResponse(version=__version__, build_date=BUILD_DATE)


@router.get("/health", response_model=HealthResponse, tags=["Health"])
def health():
    """Backend kind, whether the catalog is served, and what is cached."""
    backend = get_backend()
    return HealthResponse(
        storage_type=backend.kind(),
        has_metadata_db=backend.catalog_available(),
        cached_databases=backend.cache.size,
        cache_age_seconds=backend.cache.age_seconds,
    )


# ============================================================================
# CATALOG
# ============================================================================

def _catalog_response() -> Response:
    backend = get_backend()
    if not backend.catalog_available():
        raise HTTPException(404, "metadata catalog not available")

    with log_context(backend=backend.kind(), operation="list_catalog"):
        try:
            catalog = backend.list_catalog()
        except StorageError as e:
            raise _http_error(e) from e

    body = "\n".join(record.model_dump_json() for record in catalog)
    return Response(content=body, media_type=JSONL_MEDIA_TYPE)


@router.get("/index", tags=["Catalog"])
def catalog_index():
    """
    Full catalog as JSONL.

    One DatabaseMetadata object per line; an empty body when nothing
    was discovered.
    """
    return _catalog_response()


@router.get("/api/v1/latest_results/codeql-all", tags=["Catalog"])
def latest_results():
    """Same catalog under the path existing clients poll."""
    return _catalog_response()


@router.post(
    "/admin/cache/invalidate",
    response_model=CacheInvalidateResponse,
    tags=["Catalog"],
)
def invalidate_cache():
    """Drop the cached catalog so the next listing re-scans."""
    backend = get_backend()
    backend.invalidate_cache()
    logger.info(f"Catalog cache invalidated ({backend.kind()})")
    return CacheInvalidateResponse(storage_type=backend.kind())


# ============================================================================
# DATABASE DOWNLOAD
# ============================================================================

@router.get("/db/{filepath:path}", tags=["Databases"])
def download_database(filepath: str):
    """
    Stream a file from the backend.

    filepath is relative to the backend root (the path part of a
    catalog entry's result_url).
    """
    if not filepath:
        raise HTTPException(400, "file path required")

    backend = get_backend()
    with log_context(backend=backend.kind(), location=filepath, operation="fetch"):
        try:
            fetched = backend.fetch(filepath)
        except StorageError as e:
            raise _http_error(e) from e

    return StreamingResponse(
        fetched.iter_chunks(),
        media_type=fetched.content_type,
        headers={"Content-Length": str(fetched.size)},
    )
