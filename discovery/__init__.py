# ============================================================================
# DISCOVERY MODULE
# ============================================================================
# STATUS: Discovery - Namespace scanning and metadata extraction
# PURPOSE: Locate CodeQL databases and describe them
# CREATED: 07 OCT 2026
# ============================================================================
"""
Discovery module.

Provides:
- discover_local: Walk a directory tree
- discover_remote: Scan a blob key prefix
- project_metadata: Discovered database -> catalog record
"""

from discovery.extractor import project_metadata
from discovery.local import discover_local
from discovery.remote import discover_remote

__all__ = [
    "discover_local",
    "discover_remote",
    "project_metadata",
]
