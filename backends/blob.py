# ============================================================================
# BLOB STORAGE BACKEND
# ============================================================================
# STATUS: Backends - Azure Blob Storage backend
# PURPOSE: Catalog and file access over a blob container key prefix
# CREATED: 08 OCT 2026
# ============================================================================
"""
Blob Storage Backend

Every requested name is joined onto the configured prefix. Only
unarchived databases are discovered; archive blobs are served through
fetch but never inspected.
"""

import time
from typing import Callable, List, Optional

from core.config import BlobStorageConfig
from core.contracts import DEFAULT_CONTENT_TYPE, StorageKind
from core.errors import BackendConfigurationError
from core.logging import ComponentType, get_logger
from core.models import DiscoveredDatabase
from discovery.remote import discover_remote
from infrastructure.storage import BlobNamespace
from backends.base import FetchedFile, StorageBackend


logger = get_logger(__name__, ComponentType.BACKEND)


class BlobStorageBackend(StorageBackend):
    """Backend over one container and key prefix."""

    def __init__(
        self,
        config: BlobStorageConfig,
        namespace: Optional[BlobNamespace] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            config: Container, prefix and credentials
            namespace: Prebuilt namespace (tests); built from config if None
        """
        if not config.container:
            raise BackendConfigurationError("blob storage: container name is required")

        self.namespace = namespace if namespace is not None else BlobNamespace.from_config(config)
        self.container = config.container
        self.prefix = config.normalized_prefix
        super().__init__(config.endpoint_url, config.cache_ttl_seconds, clock)
        logger.info(f"Blob storage backend initialized: {self.container}/{self.prefix}")

    def kind(self) -> str:
        return StorageKind.BLOB.value

    def _discover(self) -> List[DiscoveredDatabase]:
        return discover_remote(self.namespace, self.prefix)

    def _relative_location(self, db: DiscoveredDatabase) -> str:
        if self.prefix and db.location.startswith(self.prefix):
            return db.location[len(self.prefix):]
        return db.location

    def object_name(self, name: str) -> str:
        return self.prefix + name.lstrip("/")

    def fetch(self, name: str) -> FetchedFile:
        key = self.object_name(name)
        props = self.namespace.properties(key)
        return FetchedFile(
            chunks=self.namespace.open_chunks(key),
            size=props.size,
            content_type=props.content_type or DEFAULT_CONTENT_TYPE,
        )

    def exists(self, name: str) -> bool:
        return self.namespace.exists(self.object_name(name))

    def close(self) -> None:
        if self._closed:
            return
        super().close()
        self.namespace.close()


__all__ = ["BlobStorageBackend"]
