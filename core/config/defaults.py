# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for server, storage backends and caching
# CREATED: 06 OCT 2026
# ============================================================================
"""
Configuration Defaults

Settings for the HTTP server and the storage backend it serves.
Every value can be overridden via environment variables; the command
line in main.py overrides the environment.

Design:
- Immutable dataclasses for settings
- Environment variable overrides
- Validation happens when a backend is built, not here
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from core.contracts import (
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_ENDPOINT_URL,
    StorageKind,
)


@dataclass(frozen=True)
class ServerDefaults:
    """Bind address for the HTTP server."""
    host: str = "127.0.0.1"
    port: int = 8070

    @property
    def base_url(self) -> str:
        """URL clients reach the server on when no endpoint is configured."""
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "ServerDefaults":
        """Create from environment variables."""
        return cls(
            host=os.getenv("HEPC_HOST", "127.0.0.1"),
            port=int(os.getenv("HEPC_PORT", 8070)),
        )


@dataclass(frozen=True)
class LocalStorageConfig:
    """
    Local filesystem backend settings.

    base_path is the namespace root that gets walked for databases.
    """
    base_path: str = ""
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS


@dataclass(frozen=True)
class BlobStorageConfig:
    """
    Azure Blob Storage backend settings.

    Authentication, in order of precedence:
    1. connection_string (e.g. Azurite for development)
    2. ManagedIdentityCredential when AZURE_CLIENT_ID is set
    3. DefaultAzureCredential
    """
    container: str = ""
    prefix: str = ""
    account_name: Optional[str] = None
    account_url: Optional[str] = None
    connection_string: Optional[str] = None
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS

    @property
    def normalized_prefix(self) -> str:
        """Key prefix with exactly one trailing slash, or empty."""
        if self.prefix and not self.prefix.endswith("/"):
            return self.prefix + "/"
        return self.prefix

    @property
    def resolved_account_url(self) -> Optional[str]:
        if self.account_url:
            return self.account_url
        if self.account_name:
            return f"https://{self.account_name}.blob.core.windows.net"
        return None


@dataclass(frozen=True)
class StorageDefaults:
    """
    Storage selection plus the settings of every backend kind.

    Only the settings matching `kind` are used.
    """
    kind: str = StorageKind.LOCAL.value
    endpoint_url: str = ""
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS

    # Local
    db_dir: str = ""

    # Blob
    blob_account: Optional[str] = None
    blob_account_url: Optional[str] = None
    blob_container: str = ""
    blob_prefix: str = ""
    blob_connection_string: Optional[str] = None

    def local_config(self, endpoint_url: str) -> LocalStorageConfig:
        return LocalStorageConfig(
            base_path=self.db_dir,
            endpoint_url=endpoint_url,
            cache_ttl_seconds=self.cache_ttl_seconds,
        )

    def blob_config(self, endpoint_url: str) -> BlobStorageConfig:
        return BlobStorageConfig(
            container=self.blob_container,
            prefix=self.blob_prefix,
            account_name=self.blob_account,
            account_url=self.blob_account_url,
            connection_string=self.blob_connection_string,
            endpoint_url=endpoint_url,
            cache_ttl_seconds=self.cache_ttl_seconds,
        )

    @classmethod
    def from_env(cls) -> "StorageDefaults":
        """Create from environment variables."""
        return cls(
            kind=os.getenv("HEPC_STORAGE", StorageKind.LOCAL.value).lower(),
            endpoint_url=os.getenv("HEPC_ENDPOINT_URL", ""),
            cache_ttl_seconds=float(os.getenv("HEPC_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS)),
            db_dir=os.getenv("HEPC_DB_DIR", ""),
            blob_account=os.getenv("HEPC_BLOB_ACCOUNT") or None,
            blob_account_url=os.getenv("HEPC_BLOB_ACCOUNT_URL") or None,
            blob_container=os.getenv("HEPC_BLOB_CONTAINER", ""),
            blob_prefix=os.getenv("HEPC_BLOB_PREFIX", ""),
            blob_connection_string=os.getenv("HEPC_BLOB_CONNECTION_STRING") or None,
        )


# ============================================================================
# GLOBAL SETTINGS INSTANCE
# ============================================================================

@dataclass
class Settings:
    """Container for all configuration."""
    server: ServerDefaults = field(default_factory=ServerDefaults)
    storage: StorageDefaults = field(default_factory=StorageDefaults)

    @property
    def endpoint_url(self) -> str:
        """Configured external URL, or the server's own address."""
        return self.storage.endpoint_url or self.server.base_url

    @classmethod
    def from_env(cls) -> "Settings":
        """Create all settings from environment variables."""
        return cls(
            server=ServerDefaults.from_env(),
            storage=StorageDefaults.from_env(),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None


__all__ = [
    "ServerDefaults",
    "LocalStorageConfig",
    "BlobStorageConfig",
    "StorageDefaults",
    "Settings",
    "get_settings",
    "reset_settings",
]
