# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 06 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the catalog service.
"""

from core.config.defaults import (
    ServerDefaults,
    LocalStorageConfig,
    BlobStorageConfig,
    StorageDefaults,
    Settings,
    get_settings,
    reset_settings,
)

__all__ = [
    "ServerDefaults",
    "LocalStorageConfig",
    "BlobStorageConfig",
    "StorageDefaults",
    "Settings",
    "get_settings",
    "reset_settings",
]
