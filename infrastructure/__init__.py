# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Storage access and concurrency primitives
# PURPOSE: Azure Blob Storage access and the cache lock
# CREATED: 08 OCT 2026
# ============================================================================
"""
Infrastructure module for the catalog service.

Provides:
- BlobNamespace: Read-only Azure Blob Storage container access
- ReadWriteLock: Shared/exclusive lock for the catalog cache

Usage:
    from infrastructure import BlobNamespace, ReadWriteLock

    namespace = BlobNamespace.from_config(config)
    names = list(namespace.list_names("dbs/"))
"""

from infrastructure.storage import (
    BlobNamespace,
    BlobProperties,
)
from infrastructure.locking import ReadWriteLock

__all__ = [
    # Blob Storage
    'BlobNamespace',
    'BlobProperties',
    # Locking
    'ReadWriteLock',
]
