# ============================================================================
# STORAGE BACKEND CONTRACT
# ============================================================================
# STATUS: Backends - Abstract storage backend
# PURPOSE: One interface for catalog listing and file access
# CREATED: 08 OCT 2026
# ============================================================================
"""
Storage Backend Contract

Every backend variant implements:
- kind: "local" or "blob"
- list_catalog: Current catalog (cached per backend)
- fetch: Open a file for streaming
- exists: Is there a file at a relative name
- catalog_available: Whether list_catalog is meaningful
- close: Release resources (idempotent)

Scanning, projection and caching are shared here; variants supply
discovery and name resolution.
"""

import time
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Iterator, List, Optional

from core.contracts import DEFAULT_CACHE_TTL_SECONDS, DEFAULT_ENDPOINT_URL
from core.logging import ComponentType, get_logger, log_context, timed
from core.models import DatabaseMetadata, DiscoveredDatabase
from discovery.extractor import project_metadata
from backends.cache import MetadataCache


logger = get_logger(__name__, ComponentType.BACKEND)


# ============================================================================
# FETCHED FILE
# ============================================================================

class FetchedFile:
    """
    An open file being served.

    Closed by the caller when done; safe to close more than once.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        size: int,
        content_type: str,
        on_close: Optional[Callable[[], None]] = None,
    ):
        self._chunks = chunks
        self.size = size
        self.content_type = content_type
        self._on_close = on_close
        self.closed = False

    def iter_chunks(self) -> Iterator[bytes]:
        """Yield the file contents, then close."""
        try:
            for chunk in self._chunks:
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> "FetchedFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ============================================================================
# BACKEND BASE
# ============================================================================

class StorageBackend(ABC):
    """Base class for storage backends."""

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.endpoint_url = endpoint_url or DEFAULT_ENDPOINT_URL
        self._cache = MetadataCache(self._scan_catalog, ttl_seconds=cache_ttl_seconds, clock=clock)
        self._closed = False

    # ========================================================================
    # VARIANT HOOKS
    # ========================================================================

    @abstractmethod
    def kind(self) -> str:
        """Backend identifier."""

    @abstractmethod
    def _discover(self) -> List[DiscoveredDatabase]:
        """Scan the namespace."""

    @abstractmethod
    def _relative_location(self, db: DiscoveredDatabase) -> str:
        """Location relative to the namespace root, "/"-separated."""

    @abstractmethod
    def fetch(self, name: str) -> FetchedFile:
        """
        Open a file for streaming.

        Raises:
            NotFound: nothing at name
            AccessDenied: name resolves outside the namespace
            StorageError: anything else (e.g. name is a directory)
        """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Whether a regular file exists at name."""

    # ========================================================================
    # SHARED BEHAVIOR
    # ========================================================================

    def _scan_catalog(self) -> List[DatabaseMetadata]:
        with log_context(backend=self.kind(), operation="scan"):
            with timed(logger, "catalog scan") as timing:
                catalog = [
                    project_metadata(db, self.endpoint_url, self._relative_location(db))
                    for db in self._discover()
                ]
            logger.info(f"Discovered {len(catalog)} databases in {timing.elapsed_seconds:.2f}s")
            return catalog

    def list_catalog(self) -> List[DatabaseMetadata]:
        """
        Current catalog, served from cache while fresh.

        Raises:
            CatalogUnavailable: namespace could not be enumerated
        """
        return self._cache.get()

    def catalog_available(self) -> bool:
        return True

    def invalidate_cache(self) -> None:
        self._cache.invalidate()

    @property
    def cache(self) -> MetadataCache:
        return self._cache

    def close(self) -> None:
        """Release cached contents. Subclasses release their clients."""
        if self._closed:
            return
        self._closed = True
        self._cache.clear()

    def __enter__(self) -> "StorageBackend":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = [
    "FetchedFile",
    "StorageBackend",
]
