# ============================================================================
# BACKENDS MODULE
# ============================================================================
# STATUS: Backends - Storage backend variants
# PURPOSE: Catalog listing and file access per storage kind
# CREATED: 08 OCT 2026
# ============================================================================
"""
Storage backends.

Provides:
- StorageBackend: Abstract contract
- LocalStorageBackend: Directory tree
- BlobStorageBackend: Azure Blob container + prefix
- MetadataCache: TTL catalog cache shared by both
- create_backend: Build the configured variant

Usage:
    from backends import create_backend_from_settings

    backend = create_backend_from_settings()
    for record in backend.list_catalog():
        print(record.result_url)
"""

from backends.base import FetchedFile, StorageBackend
from backends.cache import MetadataCache
from backends.local import LocalStorageBackend
from backends.blob import BlobStorageBackend
from backends.factory import create_backend, create_backend_from_settings

__all__ = [
    "FetchedFile",
    "StorageBackend",
    "MetadataCache",
    "LocalStorageBackend",
    "BlobStorageBackend",
    "create_backend",
    "create_backend_from_settings",
]
