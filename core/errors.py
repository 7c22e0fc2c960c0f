# ============================================================================
# STORAGE ERRORS
# ============================================================================
# STATUS: Core - Exception taxonomy for catalog and storage operations
# PURPOSE: Typed failures shared by discovery, backends and the HTTP layer
# CREATED: 06 OCT 2026
# ============================================================================
"""
Storage Errors

Failure taxonomy:
- NotFound: requested file absent (request-level, surfaced to caller)
- AccessDenied: resolved path escapes the configured root (request-level)
- CatalogUnavailable: namespace root unreachable (fatal to one listing)
- ParseSkipped: candidate container unreadable (logged, scan continues)
- BackendConfigurationError: bad configuration at construction time

Nothing here is retried.
"""

from typing import Optional


class StorageError(Exception):
    """Base exception for storage backend operations."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class NotFound(StorageError):
    """Raised when a requested file does not exist in the backend."""

    def __init__(self, path: str):
        super().__init__(f"file not found: {path}", path=path)


class AccessDenied(StorageError):
    """Raised when a requested path resolves outside the backend root."""

    def __init__(self, path: str):
        super().__init__(f"access denied: path outside base directory: {path}", path=path)


class CatalogUnavailable(StorageError):
    """Raised when the namespace being scanned cannot be enumerated."""


class ParseSkipped(StorageError):
    """
    Raised when a candidate is not a recognized container.

    Expected during a walk (plain zip files, half-written databases).
    Callers log it and move on to the next candidate.
    """


class BackendConfigurationError(StorageError):
    """Raised when a backend cannot be created from its configuration."""


__all__ = [
    "StorageError",
    "NotFound",
    "AccessDenied",
    "CatalogUnavailable",
    "ParseSkipped",
    "BackendConfigurationError",
]
