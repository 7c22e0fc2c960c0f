# ============================================================================
# CODEQL DATABASE CATALOG - MAIN APPLICATION
# ============================================================================
# STATUS: Core - FastAPI application entry point
# PURPOSE: Build the backend, serve catalog and downloads over HTTP
# CREATED: 09 OCT 2026
# ============================================================================
"""
CodeQL Database Catalog Main Application

FastAPI application that:
1. Builds the configured storage backend at startup
2. Serves the catalog as JSONL (/index)
3. Streams database files (/db/{path})

Usage:
    python main.py --storage local --db-dir /data/codeql-dbs
    uvicorn main:app --host 0.0.0.0 --port 8070   (settings from HEPC_* env)
"""

import argparse
import os
import sys
import time
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import List, Optional

from fastapi import FastAPI, Request

from __version__ import __version__, BUILD_DATE
from api.routes import router, set_backend
from backends import StorageBackend, create_backend_from_settings
from core.config import Settings, get_settings
from core.errors import BackendConfigurationError
from core.logging import ComponentType, configure_logging, get_logger, log_context, new_request_id

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
)
logger = get_logger(__name__, ComponentType.API)


def create_app(
    backend: Optional[StorageBackend] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create the FastAPI app.

    Args:
        backend: Prebuilt backend; built from settings at startup if None
        settings: Settings used when building the backend
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Injects the backend on startup, closes it on shutdown."""
        active = backend if backend is not None else create_backend_from_settings(settings)
        logger.info(f"Starting CodeQL Database Catalog v{__version__} (Build {BUILD_DATE}, storage {active.kind()})")
        set_backend(active)

        yield

        logger.info("Shutting down CodeQL Database Catalog...")
        set_backend(None)
        active.close()

    app = FastAPI(
        title="CodeQL Database Catalog",
        description="Discovers CodeQL databases and serves them to analysis clients",
        version=__version__,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = new_request_id()
        start = time.monotonic()
        response = await call_next(request)
        elapsed_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-ID"] = request_id
        with log_context(request_id=request_id):
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
            )
        return response

    app.include_router(router)
    return app


app = create_app()


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def parse_args(argv: Optional[List[str]] = None, defaults: Optional[Settings] = None) -> Settings:
    """Command line flags over environment settings."""
    defaults = defaults or get_settings()
    server, storage = defaults.server, defaults.storage

    parser = argparse.ArgumentParser(description="CodeQL database catalog server")
    parser.add_argument("--host", default=server.host, help="Bind address")
    parser.add_argument("--port", type=int, default=server.port, help="Bind port")
    parser.add_argument("--storage", default=storage.kind, help="Storage backend: local or blob")
    parser.add_argument("--db-dir", default=storage.db_dir, help="Database directory (local storage)")
    parser.add_argument("--endpoint-url", default=storage.endpoint_url,
                        help="Externally reachable base URL used in result_url")
    parser.add_argument("--blob-account", default=storage.blob_account, help="Storage account name")
    parser.add_argument("--blob-account-url", default=storage.blob_account_url, help="Storage account URL")
    parser.add_argument("--blob-container", default=storage.blob_container, help="Blob container")
    parser.add_argument("--blob-prefix", default=storage.blob_prefix, help="Key prefix inside the container")
    parser.add_argument("--blob-connection-string", default=storage.blob_connection_string,
                        help="Connection string (instead of account + credential)")
    parser.add_argument("--cache-ttl", type=float, default=storage.cache_ttl_seconds,
                        help="Catalog cache TTL in seconds (0 or less uses the default)")
    args = parser.parse_args(argv)

    return Settings(
        server=replace(server, host=args.host, port=args.port),
        storage=replace(
            storage,
            kind=args.storage.lower(),
            db_dir=args.db_dir,
            endpoint_url=args.endpoint_url,
            blob_account=args.blob_account,
            blob_account_url=args.blob_account_url,
            blob_container=args.blob_container,
            blob_prefix=args.blob_prefix,
            blob_connection_string=args.blob_connection_string,
            cache_ttl_seconds=args.cache_ttl,
        ),
    )


def main(argv: Optional[List[str]] = None) -> int:
    import uvicorn

    settings = parse_args(argv)
    try:
        backend = create_backend_from_settings(settings)
    except BackendConfigurationError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return 1

    logger.info(f"Serving on {settings.server.base_url} (endpoint {settings.endpoint_url})")
    uvicorn.run(
        create_app(backend=backend, settings=settings),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
