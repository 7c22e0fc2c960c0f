# ============================================================================
# BLOB STORAGE INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - Azure Blob Storage operations
# PURPOSE: Read-only key namespace over one blob container
# CREATED: 08 OCT 2026
# ============================================================================
"""
Blob Storage Infrastructure

Provides BlobNamespace, a thin read-only wrapper around one Azure
ContainerClient:
- list_names: Iterate blob names under a key prefix
- read: Download a small blob into memory (descriptors)
- properties: Size and content type of a blob
- open_chunks: Stream a blob chunk by chunk
- exists: Check if a blob exists

Authentication:
- Connection string when configured (Azurite for development)
- ManagedIdentityCredential when AZURE_CLIENT_ID is set
- DefaultAzureCredential otherwise

Azure SDK failures are mapped onto core.errors so callers never see
azure exception types.
"""

import os
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.identity import DefaultAzureCredential, ManagedIdentityCredential
from azure.storage.blob import ContainerClient

from core.config import BlobStorageConfig
from core.errors import BackendConfigurationError, NotFound, StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlobProperties:
    """The subset of blob properties the catalog serves."""
    name: str
    size: int
    content_type: Optional[str] = None


def _get_credential():
    """Get Azure credential for token authentication."""
    client_id = os.environ.get("AZURE_CLIENT_ID")

    if client_id:
        logger.debug("ManagedIdentityCredential initialized with client_id")
        return ManagedIdentityCredential(client_id=client_id)

    logger.debug("DefaultAzureCredential initialized")
    return DefaultAzureCredential()


# ============================================================================
# BLOB NAMESPACE
# ============================================================================

class BlobNamespace:
    """
    Read-only view of one blob container.

    Usage:
        namespace = BlobNamespace.from_config(config)

        for name in namespace.list_names("dbs/"):
            ...

        with closing(namespace):
            data = namespace.read("dbs/foo/codeql-database.yml")
    """

    def __init__(self, container_client: Any, container: str = ""):
        """
        Args:
            container_client: azure.storage.blob.ContainerClient (or a
                test double with the same methods)
            container: Container name, for log messages
        """
        self._client = container_client
        self.container = container or getattr(container_client, "container_name", "")

    @classmethod
    def from_config(cls, config: BlobStorageConfig) -> "BlobNamespace":
        """
        Build a namespace from backend configuration.

        Raises:
            BackendConfigurationError: no way to reach an account
        """
        if not config.container:
            raise BackendConfigurationError("blob storage: container name is required")

        if config.connection_string:
            client = ContainerClient.from_connection_string(
                config.connection_string,
                container_name=config.container,
            )
            logger.info(f"BlobNamespace initialized from connection string: {config.container}")
            return cls(client, config.container)

        account_url = config.resolved_account_url
        if not account_url:
            raise BackendConfigurationError(
                "blob storage: account name, account URL or connection string is required"
            )

        client = ContainerClient(
            account_url=account_url,
            container_name=config.container,
            credential=_get_credential(),
        )
        logger.info(f"BlobNamespace initialized for {account_url}/{config.container}")
        return cls(client, config.container)

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    def list_names(self, prefix: str = "") -> Iterator[str]:
        """
        Iterate blob names starting with prefix.

        Raises:
            StorageError: listing failed (raised while iterating)
        """
        try:
            for blob in self._client.list_blobs(name_starts_with=prefix or None):
                yield blob.name
        except AzureError as e:
            raise StorageError(
                f"failed to list blobs in '{self.container}' under '{prefix}': {e}",
                path=prefix,
            ) from e

    def read(self, name: str) -> bytes:
        """Download a whole blob."""
        try:
            return self._client.download_blob(name).readall()
        except ResourceNotFoundError as e:
            raise NotFound(name) from e
        except AzureError as e:
            raise StorageError(f"failed to read blob '{name}': {e}", path=name) from e

    def properties(self, name: str) -> BlobProperties:
        """Size and content type of a blob."""
        try:
            props = self._client.get_blob_client(name).get_blob_properties()
        except ResourceNotFoundError as e:
            raise NotFound(name) from e
        except AzureError as e:
            raise StorageError(f"failed to stat blob '{name}': {e}", path=name) from e

        content_type = props.content_settings.content_type if props.content_settings else None
        return BlobProperties(name=name, size=props.size, content_type=content_type)

    def open_chunks(self, name: str) -> Iterator[bytes]:
        """Start a download and return its chunk iterator."""
        try:
            downloader = self._client.download_blob(name)
        except ResourceNotFoundError as e:
            raise NotFound(name) from e
        except AzureError as e:
            raise StorageError(f"failed to open blob '{name}': {e}", path=name) from e
        return downloader.chunks()

    def exists(self, name: str) -> bool:
        """Check if a blob exists."""
        try:
            self._client.get_blob_client(name).get_blob_properties()
            return True
        except ResourceNotFoundError:
            return False
        except AzureError as e:
            raise StorageError(f"failed to stat blob '{name}': {e}", path=name) from e

    def close(self) -> None:
        """Release the underlying HTTP pipeline."""
        self._client.close()
        logger.debug(f"BlobNamespace closed: {self.container}")


__all__ = [
    "BlobProperties",
    "BlobNamespace",
]
