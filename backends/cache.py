# ============================================================================
# METADATA CACHE
# ============================================================================
# STATUS: Backends - Time-bounded catalog cache
# PURPOSE: Serve repeated catalog listings without rescanning
# CREATED: 08 OCT 2026
# ============================================================================
"""
Metadata Cache

Holds the last catalog a backend produced.

Rules:
- A non-empty catalog younger than the TTL is served as a list copy
- Anything else triggers the loader; the scan runs outside the lock
  and only the store takes the write side
- Empty catalogs are stored but never served from cache
- Concurrent misses each scan; the last store wins
- A scan that overlaps invalidate() is returned to its caller but not
  stored
- A TTL of zero or less means the default TTL
"""

import time
from typing import Callable, List, Optional

from core.contracts import DEFAULT_CACHE_TTL_SECONDS
from core.logging import ComponentType, get_logger
from core.models import DatabaseMetadata
from infrastructure.locking import ReadWriteLock


logger = get_logger(__name__, ComponentType.CACHE)

Loader = Callable[[], List[DatabaseMetadata]]


class MetadataCache:
    """TTL cache over one catalog loader."""

    def __init__(
        self,
        loader: Loader,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self.ttl_seconds = ttl_seconds if ttl_seconds > 0 else DEFAULT_CACHE_TTL_SECONDS
        self._clock = clock
        self._lock = ReadWriteLock()
        self._catalog: Optional[List[DatabaseMetadata]] = None
        self._stored_at: Optional[float] = None
        self._generation = 0

    def _fresh(self) -> bool:
        if not self._catalog or self._stored_at is None:
            return False
        return self._clock() - self._stored_at < self.ttl_seconds

    def get(self) -> List[DatabaseMetadata]:
        """
        Current catalog, scanning if the cached one is missing or stale.

        Loader exceptions propagate and leave the cache untouched.
        """
        with self._lock.read_locked():
            if self._fresh():
                return list(self._catalog)
            generation = self._generation

        logger.debug("Catalog cache miss, scanning")
        catalog = list(self._loader())

        with self._lock.write_locked():
            if self._generation != generation:
                logger.debug("Cache invalidated during scan, result not stored")
                return list(catalog)
            self._catalog = catalog
            self._stored_at = self._clock()

        return list(catalog)

    def invalidate(self) -> None:
        """Drop the cached catalog; the next get() scans."""
        with self._lock.write_locked():
            self._catalog = None
            self._stored_at = None
            self._generation += 1
        logger.debug("Catalog cache invalidated")

    def clear(self) -> None:
        """Release the cached catalog at backend shutdown."""
        self.invalidate()

    @property
    def age_seconds(self) -> Optional[float]:
        """Seconds since the last store, None when empty."""
        with self._lock.read_locked():
            if self._stored_at is None:
                return None
            return self._clock() - self._stored_at

    @property
    def size(self) -> int:
        with self._lock.read_locked():
            return len(self._catalog) if self._catalog else 0


__all__ = ["MetadataCache"]
