# ============================================================================
# API SCHEMAS
# ============================================================================
# STATUS: Core - Response schemas
# PURPOSE: Pydantic models for JSON responses
# CREATED: 09 OCT 2026
# ============================================================================
"""
API Schemas

Response models for the JSON endpoints. Catalog lines on /index are
DatabaseMetadata records (core.models), not defined here.
"""

from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Service health."""
    status: str = "ok"
    storage_type: str = Field(..., description="Backend kind: local or blob")
    has_metadata_db: bool = Field(..., description="Whether the catalog endpoints are served")
    cached_databases: int = Field(0, description="Records in the cached catalog")
    cache_age_seconds: Optional[float] = Field(None, description="Seconds since the last scan was stored")


class LivenessResponse(BaseModel):
    """Liveness probe."""
    status: str = "alive"
    version: str
    build_date: str


class CacheInvalidateResponse(BaseModel):
    """Result of a cache invalidation."""
    status: str = "invalidated"
    storage_type: str
