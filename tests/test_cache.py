# ============================================================================
# METADATA CACHE TESTS
# ============================================================================
# STATUS: Tests - TTL cache and reader/writer lock
# PURPOSE: Verify backends/cache.py and infrastructure/locking.py
# CREATED: 10 OCT 2026
# ============================================================================
"""
Metadata Cache Tests

Run with:
    pytest tests/test_cache.py -v
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from backends.cache import MetadataCache
from core.models import DatabaseMetadata
from infrastructure.locking import ReadWriteLock


def _record(name: str) -> DatabaseMetadata:
    return DatabaseMetadata(
        content_hash=name * 8,
        build_cid=(name * 10)[:10],
        result_url=f"http://catalog.test/db/{name}",
        projname=f"acme/{name}",
    )


class CountingLoader:
    def __init__(self, catalog):
        self.catalog = catalog
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return list(self.catalog)


# ============================================================================
# TTL
# ============================================================================

class TestMetadataCache:

    def test_fresh_catalog_served_from_cache(self, clock):
        loader = CountingLoader([_record("a")])
        cache = MetadataCache(loader, ttl_seconds=300, clock=clock)

        first = cache.get()
        clock.advance(299)
        second = cache.get()

        assert first == second
        assert loader.calls == 1

    def test_stale_catalog_rescanned(self, clock):
        loader = CountingLoader([_record("a")])
        cache = MetadataCache(loader, ttl_seconds=300, clock=clock)

        cache.get()
        clock.advance(300)
        loader.catalog = [_record("a"), _record("b")]

        assert len(cache.get()) == 2
        assert loader.calls == 2

    def test_empty_catalog_never_served_from_cache(self, clock):
        loader = CountingLoader([])
        cache = MetadataCache(loader, clock=clock)

        cache.get()
        cache.get()

        assert loader.calls == 2

    def test_invalidate_forces_rescan(self, clock):
        loader = CountingLoader([_record("a")])
        cache = MetadataCache(loader, clock=clock)

        cache.get()
        cache.invalidate()
        cache.get()

        assert loader.calls == 2

    def test_scan_overlapping_invalidate_is_not_stored(self, clock):
        scanning = threading.Event()
        release = threading.Event()
        loader = CountingLoader([_record("a")])

        def slow_loader():
            catalog = loader()
            scanning.set()
            release.wait(5)
            return catalog

        cache = MetadataCache(slow_loader, clock=clock)
        worker = threading.Thread(target=cache.get)
        worker.start()
        assert scanning.wait(5)

        loader.catalog = [_record("a"), _record("b")]
        cache.invalidate()
        release.set()
        worker.join(5)

        assert cache.size == 0
        assert len(cache.get()) == 2
        assert loader.calls == 2

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_uses_default(self, clock, ttl):
        loader = CountingLoader([_record("a")])
        cache = MetadataCache(loader, ttl_seconds=ttl, clock=clock)

        cache.get()
        clock.advance(299)
        cache.get()

        assert cache.ttl_seconds == 300
        assert loader.calls == 1

    def test_returned_list_is_a_copy(self, clock):
        cache = MetadataCache(CountingLoader([_record("a")]), clock=clock)

        cache.get().clear()

        assert len(cache.get()) == 1

    def test_loader_failure_propagates_and_keeps_state(self, clock):
        loader = CountingLoader([_record("a")])
        cache = MetadataCache(loader, ttl_seconds=10, clock=clock)
        cache.get()
        clock.advance(11)

        def failing():
            raise RuntimeError("scan failed")

        cache._loader = failing
        with pytest.raises(RuntimeError):
            cache.get()

        assert cache.size == 1

    def test_age_and_clear(self, clock):
        cache = MetadataCache(CountingLoader([_record("a")]), clock=clock)
        assert cache.age_seconds is None

        cache.get()
        clock.advance(5)
        assert cache.age_seconds == 5

        cache.clear()
        assert cache.size == 0
        assert cache.age_seconds is None

    def test_concurrent_readers_see_same_catalog(self):
        loader = CountingLoader([_record("a"), _record("b")])
        cache = MetadataCache(loader)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: cache.get(), range(32)))

        assert all(result == results[0] for result in results)
        assert loader.calls >= 1


# ============================================================================
# LOCK
# ============================================================================

class TestReadWriteLock:

    def test_readers_share(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def reader():
            with lock.read_locked():
                acquired.set()

        with lock.read_locked():
            thread = threading.Thread(target=reader)
            thread.start()
            assert acquired.wait(timeout=2)
        thread.join(timeout=2)

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def writer():
            with lock.write_locked():
                acquired.set()

        lock.acquire_read()
        thread = threading.Thread(target=writer)
        thread.start()
        assert not acquired.wait(timeout=0.2)

        lock.release_read()
        assert acquired.wait(timeout=2)
        thread.join(timeout=2)

    def test_reader_waits_for_writer(self):
        lock = ReadWriteLock()
        acquired = threading.Event()

        def reader():
            with lock.read_locked():
                acquired.set()

        lock.acquire_write()
        thread = threading.Thread(target=reader)
        thread.start()
        assert not acquired.wait(timeout=0.2)

        lock.release_write()
        assert acquired.wait(timeout=2)
        thread.join(timeout=2)
