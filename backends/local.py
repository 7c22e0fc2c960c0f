# ============================================================================
# LOCAL STORAGE BACKEND
# ============================================================================
# STATUS: Backends - Filesystem backend
# PURPOSE: Catalog and file access over a local directory tree
# CREATED: 08 OCT 2026
# ============================================================================
"""
Local Storage Backend

Serves databases found under base_path. Every requested name is
resolved (symlinks included) and must stay inside base_path.
"""

import mimetypes
import os
import stat
import time
from typing import BinaryIO, Callable, Iterator, List

from core.config import LocalStorageConfig
from core.contracts import DEFAULT_CONTENT_TYPE, StorageKind
from core.errors import AccessDenied, BackendConfigurationError, NotFound, StorageError
from core.logging import ComponentType, get_logger
from core.models import DiscoveredDatabase
from discovery.local import discover_local
from backends.base import FetchedFile, StorageBackend


logger = get_logger(__name__, ComponentType.BACKEND)

READ_CHUNK_SIZE = 1024 * 1024


def _read_chunks(handle: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = handle.read(READ_CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


class LocalStorageBackend(StorageBackend):
    """Backend over a directory on a local or mounted filesystem."""

    def __init__(
        self,
        config: LocalStorageConfig,
        clock: Callable[[], float] = time.monotonic,
    ):
        if not config.base_path:
            raise BackendConfigurationError("local storage: base path is required")
        if not os.path.exists(config.base_path):
            raise BackendConfigurationError(
                f"local storage: directory does not exist: {config.base_path}",
                path=config.base_path,
            )
        if not os.path.isdir(config.base_path):
            raise BackendConfigurationError(
                f"local storage: not a directory: {config.base_path}",
                path=config.base_path,
            )

        super().__init__(config.endpoint_url, config.cache_ttl_seconds, clock)
        self.base_path = os.path.abspath(config.base_path)
        logger.info(f"Local storage backend initialized: {self.base_path}")

    def kind(self) -> str:
        return StorageKind.LOCAL.value

    def _discover(self) -> List[DiscoveredDatabase]:
        return discover_local(self.base_path)

    def _relative_location(self, db: DiscoveredDatabase) -> str:
        return os.path.relpath(db.location, self.base_path).replace(os.sep, "/")

    def resolve(self, name: str) -> str:
        """
        Absolute path for name, with symlinks resolved.

        Raises:
            AccessDenied: the resolved path is outside base_path, or name
                cannot be a filesystem path (embedded NUL)
        """
        candidate = name if os.path.isabs(name) else os.path.join(self.base_path, name)
        try:
            resolved = os.path.realpath(candidate)
        except ValueError as e:
            logger.warning(f"Rejected unresolvable path: {name!r}")
            raise AccessDenied(name) from e
        root = os.path.realpath(self.base_path)
        try:
            inside = os.path.commonpath([root, resolved]) == root
        except ValueError:
            inside = False
        if not inside:
            logger.warning(f"Rejected path outside base directory: {name}")
            raise AccessDenied(name)
        return resolved

    def fetch(self, name: str) -> FetchedFile:
        path = self.resolve(name)
        try:
            info = os.stat(path)
        except (FileNotFoundError, NotADirectoryError) as e:
            raise NotFound(name) from e
        except OSError as e:
            raise StorageError(f"failed to stat file: {e}", path=name) from e

        if stat.S_ISDIR(info.st_mode):
            raise StorageError(f"is a directory: {name}", path=name)

        try:
            handle = open(path, "rb")
        except OSError as e:
            raise StorageError(f"failed to open file: {e}", path=name) from e

        content_type = mimetypes.guess_type(path)[0] or DEFAULT_CONTENT_TYPE
        return FetchedFile(
            chunks=_read_chunks(handle),
            size=info.st_size,
            content_type=content_type,
            on_close=handle.close,
        )

    def exists(self, name: str) -> bool:
        path = self.resolve(name)
        try:
            info = os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise StorageError(f"failed to stat file: {e}", path=name) from e
        return not stat.S_ISDIR(info.st_mode)


__all__ = ["LocalStorageBackend"]
