# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums and shared constants
# PURPOSE: Names that cross discovery, backends and the HTTP layer
# LAST_REVIEWED: 06 OCT 2026
# EXPORTS: StorageKind, DescriptorFormat, WalkAction, constants
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the database catalog.

These are the identifiers that cross boundaries:
- Configuration (storage kind selection)
- Discovery (descriptor names, walk pruning)
- Wire (catalog sentinel values, content types)
"""

from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class StorageKind(str, Enum):
    """Storage backend identifiers (what kind() returns)."""
    LOCAL = "local"              # Directory tree on a local/mounted filesystem
    BLOB = "blob"                # Azure Blob Storage container + key prefix


class DescriptorFormat(str, Enum):
    """
    Metadata descriptor generations.

    STRUCTURED is preferred; LEGACY is only consulted when the
    container carries no structured descriptor.
    """
    STRUCTURED = "structured"    # codeql-database.yml (YAML)
    LEGACY = "legacy"            # .dbinfo (XML)


class WalkAction(str, Enum):
    """
    Visitor verdict during a namespace walk.

    SKIP_SUBTREE marks a container boundary: nothing below a
    discovered database is scanned for nested databases.
    """
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"


# ============================================================================
# CONSTANTS
# ============================================================================

STRUCTURED_DESCRIPTOR = "codeql-database.yml"
LEGACY_DESCRIPTOR = ".dbinfo"
ARCHIVE_EXTENSION = ".zip"
LANGUAGE_DIR_PREFIX = "db-"

UNKNOWN = "unknown"

# Owners that say nothing about the repository (e.g. /opt/src checkouts)
GENERIC_OWNERS = frozenset({"opt", "src", UNKNOWN})

GIT_BRANCH = "HEAD"
TOOL_NAME = "codeql"
BUILD_CID_LENGTH = 10

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_ENDPOINT_URL = "http://localhost:8080"
DEFAULT_CACHE_TTL_SECONDS = 300.0


__all__ = [
    "StorageKind",
    "DescriptorFormat",
    "WalkAction",
    "STRUCTURED_DESCRIPTOR",
    "LEGACY_DESCRIPTOR",
    "ARCHIVE_EXTENSION",
    "LANGUAGE_DIR_PREFIX",
    "UNKNOWN",
    "GENERIC_OWNERS",
    "GIT_BRANCH",
    "TOOL_NAME",
    "BUILD_CID_LENGTH",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_ENDPOINT_URL",
    "DEFAULT_CACHE_TTL_SECONDS",
]
