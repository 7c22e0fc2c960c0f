# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts, errors and models
# LAST_REVIEWED: 06 OCT 2026
# ============================================================================

from core.contracts import StorageKind, DescriptorFormat, WalkAction
from core.errors import (
    StorageError,
    NotFound,
    AccessDenied,
    CatalogUnavailable,
    ParseSkipped,
    BackendConfigurationError,
)
from core.models import (
    CreationMetadata,
    DescriptorInfo,
    DiscoveredDatabase,
    DatabaseMetadata,
)

__all__ = [
    # Enums
    "StorageKind",
    "DescriptorFormat",
    "WalkAction",
    # Errors
    "StorageError",
    "NotFound",
    "AccessDenied",
    "CatalogUnavailable",
    "ParseSkipped",
    "BackendConfigurationError",
    # Models
    "CreationMetadata",
    "DescriptorInfo",
    "DiscoveredDatabase",
    "DatabaseMetadata",
]
