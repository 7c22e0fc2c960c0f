# ============================================================================
# READER/WRITER LOCK
# ============================================================================
# STATUS: Infrastructure - Concurrency control
# PURPOSE: Shared/exclusive lock guarding the catalog cache
# CREATED: 08 OCT 2026
# ============================================================================
"""
Reader/Writer Lock

Many readers or one writer:
- Readers share the lock (concurrent /index requests)
- A writer excludes readers and other writers (cache store/invalidate)
- Writers waiting for the lock block new readers, so a steady stream of
  reads cannot starve a store

Not reentrant. A thread holding the read side must release it before
taking the write side.

Usage:
    from infrastructure.locking import ReadWriteLock

    lock = ReadWriteLock()

    with lock.read_locked():
        snapshot = list(entries)

    with lock.write_locked():
        entries = fresh
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Writer-preferring reader/writer lock built on a Condition."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    # =========================================================================
    # SHARED (READ) SIDE
    # =========================================================================

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    # =========================================================================
    # EXCLUSIVE (WRITE) SIDE
    # =========================================================================

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()


__all__ = ["ReadWriteLock"]
