# ============================================================================
# DATABASE MODELS
# ============================================================================
# STATUS: Core model - Discovered container and catalog projection
# PURPOSE: Transient discovery record and the stable catalog wire record
# LAST_REVIEWED: 06 OCT 2026
# EXPORTS: CreationMetadata, DescriptorInfo, DiscoveredDatabase, DatabaseMetadata
# DEPENDENCIES: pydantic
# ============================================================================
"""
Database Models

Two shapes:
- DiscoveredDatabase: what a scan finds. Created during discovery and
  projected immediately; never stored on its own.
- DatabaseMetadata: the catalog record served to clients. Field names
  are the wire contract (JSONL lines on /index).
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from core.contracts import UNKNOWN


@dataclass(frozen=True)
class CreationMetadata:
    """creationMetadata block of codeql-database.yml."""
    sha: str = ""
    cli_version: str = ""
    creation_time: str = ""


@dataclass(frozen=True)
class DescriptorInfo:
    """Fields read from either descriptor generation."""
    source_location_prefix: str = ""
    primary_language: str = ""
    creation_metadata: Optional[CreationMetadata] = None


@dataclass
class DiscoveredDatabase:
    """
    A located database container.

    location is backend specific: a filesystem path for the local
    backend, a key prefix (no trailing slash) for the blob backend.
    """
    location: str
    display_name: str
    is_archived: bool
    content_hash: str
    language: str = UNKNOWN
    source_location_prefix: str = ""
    creation_metadata: Optional[CreationMetadata] = None
    file_size_bytes: int = 0
    owner: str = UNKNOWN
    repo: str = UNKNOWN


class DatabaseMetadata(BaseModel):
    """
    Catalog entry for one CodeQL database.

    Keyed by content_hash. Immutable once built; the cache hands out
    list copies without copying the records.
    """

    content_hash: str = Field(..., min_length=1, description="SHA-256 of archive bytes or of the location")
    build_cid: str = Field(..., description="Build context identifier (10 hex chars)")
    git_branch: str = Field(default="HEAD")
    git_commit_id: str = Field(default="", description="Source revision the database was built from")
    git_owner: str = Field(default=UNKNOWN)
    git_repo: str = Field(default=UNKNOWN)
    ingestion_datetime_utc: str = Field(default="", description="Database creation time as recorded")
    primary_language: str = Field(default=UNKNOWN)
    result_url: str = Field(..., description="<endpoint>/db/<relative-location>")
    tool_name: str = Field(default="codeql")
    tool_version: str = Field(default="", description="CodeQL CLI version")
    projname: str = Field(..., description="<owner>/<repo>")
    db_file_size: int = Field(default=0, ge=0, description="Archive size or summed directory size; 0 when not computed")

    model_config = {"frozen": True}


__all__ = [
    "CreationMetadata",
    "DescriptorInfo",
    "DiscoveredDatabase",
    "DatabaseMetadata",
]
