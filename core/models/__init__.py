# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for catalog models
# LAST_REVIEWED: 06 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Discovery records are dataclasses (internal, transient); the catalog
record is a Pydantic model because it is serialized onto the wire.
"""

from core.models.database import (
    CreationMetadata,
    DescriptorInfo,
    DiscoveredDatabase,
    DatabaseMetadata,
)

__all__ = [
    "CreationMetadata",
    "DescriptorInfo",
    "DiscoveredDatabase",
    "DatabaseMetadata",
]
