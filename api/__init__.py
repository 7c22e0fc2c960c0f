# ============================================================================
# API MODULE
# ============================================================================
# STATUS: Core - FastAPI routes
# PURPOSE: HTTP API for catalog listing and database download
# CREATED: 09 OCT 2026
# ============================================================================
"""
API Module

FastAPI routes for the catalog service.
"""

from .routes import router, set_backend, get_backend
from .schemas import (
    HealthResponse,
    LivenessResponse,
    CacheInvalidateResponse,
)

__all__ = [
    "router",
    "set_backend",
    "get_backend",
    "HealthResponse",
    "LivenessResponse",
    "CacheInvalidateResponse",
]
