# ============================================================================
# REMOTE DISCOVERY
# ============================================================================
# STATUS: Discovery - Object store namespace scanner
# PURPOSE: Find unarchived CodeQL databases under a blob key prefix
# CREATED: 08 OCT 2026
# ============================================================================
"""
Remote Discovery

An object store has no directories, only keys. A database is any key
prefix P such that "P/codeql-database.yml" exists under the configured
prefix. Archives are not inspected remotely.

Candidates are visited shortest first; a candidate that sits inside an
already visited one is skipped, the same container boundary the local
walk enforces with SKIP_SUBTREE.
"""

import posixpath
from typing import Callable, Iterable, List, Protocol, Set

from core.contracts import (
    LANGUAGE_DIR_PREFIX,
    STRUCTURED_DESCRIPTOR,
    UNKNOWN,
    DescriptorFormat,
    WalkAction,
)
from core.errors import CatalogUnavailable, StorageError
from core.logging import ComponentType, get_logger, log_context
from core.models import DiscoveredDatabase
from discovery.extractor import (
    assemble_database,
    hash_location,
    language_from_members,
    parse_structured_descriptor,
)


logger = get_logger(__name__, ComponentType.DISCOVERY)

DESCRIPTOR_SUFFIX = "/" + STRUCTURED_DESCRIPTOR


class KeyNamespace(Protocol):
    """What remote discovery needs from an object store."""

    def list_names(self, prefix: str) -> Iterable[str]: ...

    def read(self, name: str) -> bytes: ...


# ============================================================================
# CANDIDATES
# ============================================================================

def candidate_locations(names: Iterable[str], prefix: str = "") -> List[str]:
    """
    Database locations implied by descriptor keys, sorted.

    "dbs/a/codeql-database.yml" -> "dbs/a". The prefix itself is never
    a candidate.
    """
    locations: Set[str] = set()
    for name in names:
        if not name.endswith(DESCRIPTOR_SUFFIX):
            continue
        location = name[: -len(DESCRIPTOR_SUFFIX)]
        if not location or location + "/" == prefix:
            continue
        locations.add(location)
    return sorted(locations)


def visit_candidates(locations: List[str], visitor: Callable[[str], WalkAction]) -> None:
    """
    Visit sorted candidate locations, honoring SKIP_SUBTREE.

    Sorting puts every location before the locations nested in it.
    """
    pruned: Set[str] = set()
    for location in locations:
        parts = location.split("/")
        if any("/".join(parts[:depth]) in pruned for depth in range(1, len(parts))):
            logger.debug(f"Skipping nested candidate {location}")
            continue
        if visitor(location) == WalkAction.SKIP_SUBTREE:
            pruned.add(location)


# ============================================================================
# EXTRACTION
# ============================================================================

def infer_remote_language(namespace: KeyNamespace, location: str) -> str:
    """Language from the first key under <location>/db-; "unknown" on failure."""
    try:
        for name in namespace.list_names(f"{location}/{LANGUAGE_DIR_PREFIX}"):
            return language_from_members([name[len(location) + 1:]])
    except StorageError as e:
        logger.warning(f"Language listing failed for {location}: {e}")
    return UNKNOWN


def extract_remote(namespace: KeyNamespace, location: str) -> DiscoveredDatabase:
    """
    Read one remote database.

    Size is not computed remotely and is always 0.

    Raises:
        StorageError: descriptor could not be read or parsed
    """
    info = parse_structured_descriptor(namespace.read(location + DESCRIPTOR_SUFFIX))

    return assemble_database(
        location=location,
        display_name=posixpath.basename(location),
        is_archived=False,
        info=info,
        fmt=DescriptorFormat.STRUCTURED,
        content_hash=hash_location(location),
        file_size_bytes=0,
        infer_language=lambda: infer_remote_language(namespace, location),
    )


# ============================================================================
# DISCOVERY
# ============================================================================

def discover_remote(namespace: KeyNamespace, prefix: str = "") -> List[DiscoveredDatabase]:
    """
    Discover every database under prefix.

    Raises:
        CatalogUnavailable: the prefix could not be listed
    """
    try:
        locations = candidate_locations(namespace.list_names(prefix), prefix)
    except StorageError as e:
        raise CatalogUnavailable(f"cannot list namespace: {e}", path=prefix) from e

    databases: List[DiscoveredDatabase] = []

    def visit(location: str) -> WalkAction:
        with log_context(location=location, operation="extract"):
            try:
                databases.append(extract_remote(namespace, location))
            except StorageError as e:
                logger.warning(f"Skipping container: {e}")
        return WalkAction.SKIP_SUBTREE

    visit_candidates(locations, visit)
    logger.debug(f"Remote discovery found {len(databases)} databases under '{prefix}'")
    return databases


__all__ = [
    "KeyNamespace",
    "candidate_locations",
    "visit_candidates",
    "infer_remote_language",
    "extract_remote",
    "discover_remote",
]
