# ============================================================================
# BACKEND FACTORY
# ============================================================================
# STATUS: Backends - Backend selection from configuration
# PURPOSE: Build the configured storage backend at startup
# CREATED: 08 OCT 2026
# ============================================================================
"""
Backend Factory

Maps StorageKind to a builder. The variant is fixed for the life of the
backend; nothing switches on backend type after construction.

Design:
- Builders are a simple dict (kind -> builder)
- Fail-fast on unknown kinds and missing required settings
"""

from typing import Callable, Dict, Optional

from core.config import Settings, StorageDefaults, get_settings
from core.contracts import StorageKind
from core.errors import BackendConfigurationError
from core.logging import ComponentType, get_logger
from backends.base import StorageBackend
from backends.blob import BlobStorageBackend
from backends.local import LocalStorageBackend


logger = get_logger(__name__, ComponentType.BACKEND)

Builder = Callable[[StorageDefaults, str], StorageBackend]


def _build_local(storage: StorageDefaults, endpoint_url: str) -> StorageBackend:
    if not storage.db_dir:
        raise BackendConfigurationError("local storage requires a database directory (--db-dir / HEPC_DB_DIR)")
    return LocalStorageBackend(storage.local_config(endpoint_url))


def _build_blob(storage: StorageDefaults, endpoint_url: str) -> StorageBackend:
    if not storage.blob_container:
        raise BackendConfigurationError("blob storage requires a container (--blob-container / HEPC_BLOB_CONTAINER)")
    return BlobStorageBackend(storage.blob_config(endpoint_url))


_BUILDERS: Dict[StorageKind, Builder] = {
    StorageKind.LOCAL: _build_local,
    StorageKind.BLOB: _build_blob,
}


def create_backend(storage: StorageDefaults, endpoint_url: str) -> StorageBackend:
    """
    Build the backend selected by storage.kind.

    Raises:
        BackendConfigurationError: unknown kind or incomplete settings
    """
    try:
        kind = StorageKind(storage.kind.lower())
    except ValueError:
        supported = ", ".join(k.value for k in StorageKind)
        raise BackendConfigurationError(
            f"unknown storage type: {storage.kind} (supported: {supported})"
        ) from None

    backend = _BUILDERS[kind](storage, endpoint_url)
    logger.info(f"Storage backend ready: {backend.kind()} (endpoint {endpoint_url})")
    return backend


def create_backend_from_settings(settings: Optional[Settings] = None) -> StorageBackend:
    """Build the backend from settings (global settings by default)."""
    settings = settings or get_settings()
    return create_backend(settings.storage, settings.endpoint_url)


__all__ = [
    "create_backend",
    "create_backend_from_settings",
]
