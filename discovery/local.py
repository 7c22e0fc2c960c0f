# ============================================================================
# LOCAL DISCOVERY
# ============================================================================
# STATUS: Discovery - Filesystem namespace walker
# PURPOSE: Find CodeQL databases under a local directory tree
# CREATED: 07 OCT 2026
# ============================================================================
"""
Local Discovery

Walks a directory tree and turns every database container it meets into
a DiscoveredDatabase:

- Unarchived: a directory holding codeql-database.yml. The walk never
  descends into it.
- Archived: a *.zip file (case-insensitive) whose members include a
  descriptor.

A container that cannot be read or parsed is logged and skipped; only a
failure on the namespace root itself aborts the scan.
"""

import os
import zipfile
import zlib
from typing import Callable, Iterator, List, Set

from core.contracts import (
    ARCHIVE_EXTENSION,
    STRUCTURED_DESCRIPTOR,
    DescriptorFormat,
    WalkAction,
)
from core.errors import CatalogUnavailable, ParseSkipped
from core.logging import ComponentType, get_logger, log_context
from core.models import DiscoveredDatabase
from discovery.extractor import (
    assemble_database,
    find_descriptor,
    hash_chunks,
    hash_location,
    language_from_members,
    parse_descriptor,
    parse_structured_descriptor,
)


logger = get_logger(__name__, ComponentType.DISCOVERY)

HASH_CHUNK_SIZE = 1024 * 1024

# visitor(path, is_dir) -> WalkAction
Visitor = Callable[[str, bool], WalkAction]


# ============================================================================
# WALK
# ============================================================================

def walk_namespace(root: str, visitor: Visitor) -> None:
    """
    Top-down walk calling visitor for every entry below root.

    The root itself is not visited. Entries are visited in sorted order,
    files before subdirectories. Returning SKIP_SUBTREE for a directory
    keeps the walk out of it.

    Raises:
        CatalogUnavailable: root is missing or unreadable
    """
    if not os.path.isdir(root):
        raise CatalogUnavailable(f"namespace root is not a directory: {root}", path=root)

    normalized_root = os.path.normpath(root)

    def on_error(error: OSError) -> None:
        if os.path.normpath(error.filename or "") == normalized_root:
            raise CatalogUnavailable(f"cannot read namespace root: {error}", path=root) from error
        logger.warning(f"Skipping unreadable directory {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        for filename in sorted(filenames):
            visitor(os.path.join(dirpath, filename), False)

        kept = []
        for dirname in sorted(dirnames):
            if visitor(os.path.join(dirpath, dirname), True) != WalkAction.SKIP_SUBTREE:
                kept.append(dirname)
        dirnames[:] = kept


# ============================================================================
# EXTRACTION
# ============================================================================

def _file_chunks(path: str) -> Iterator[bytes]:
    with open(path, "rb") as handle:
        while True:
            chunk = handle.read(HASH_CHUNK_SIZE)
            if not chunk:
                return
            yield chunk


def _language_dirs(db_path: str) -> List[str]:
    try:
        with os.scandir(db_path) as entries:
            return sorted(entry.name for entry in entries if entry.is_dir())
    except OSError:
        return []


def directory_size(path: str) -> int:
    """Sum of regular file sizes below path; unreadable entries count as 0."""
    total = 0
    for dirpath, _, filenames in os.walk(path):
        for filename in filenames:
            try:
                total += os.lstat(os.path.join(dirpath, filename)).st_size
            except OSError:
                continue
    return total


def extract_archived(zip_path: str) -> DiscoveredDatabase:
    """
    Read a zipped database without unpacking it.

    Raises:
        ParseSkipped: not a readable zip, no descriptor, or bad descriptor
        OSError: the file disappeared or cannot be read
    """
    try:
        with zipfile.ZipFile(zip_path) as archive:
            member_names = archive.namelist()
            found = find_descriptor(member_names)
            if found is None:
                raise ParseSkipped("no CodeQL descriptor in archive", path=zip_path)
            fmt, member = found
            data = archive.read(member)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, NotImplementedError,
            RuntimeError, EOFError, zlib.error) as e:
        raise ParseSkipped(f"unreadable archive: {e}", path=zip_path) from e

    info = parse_descriptor(fmt, data)
    size = os.stat(zip_path).st_size

    return assemble_database(
        location=zip_path,
        display_name=os.path.basename(zip_path),
        is_archived=True,
        info=info,
        fmt=fmt,
        content_hash=hash_chunks(_file_chunks(zip_path)),
        file_size_bytes=size,
        infer_language=lambda: language_from_members(member_names),
    )


def extract_unarchived(db_path: str) -> DiscoveredDatabase:
    """
    Read a database directory in place.

    Raises:
        ParseSkipped: bad descriptor
        OSError: descriptor cannot be read
    """
    with open(os.path.join(db_path, STRUCTURED_DESCRIPTOR), "rb") as handle:
        data = handle.read()
    info = parse_structured_descriptor(data)

    return assemble_database(
        location=db_path,
        display_name=os.path.basename(db_path),
        is_archived=False,
        info=info,
        fmt=DescriptorFormat.STRUCTURED,
        content_hash=hash_location(db_path),
        file_size_bytes=directory_size(db_path),
        infer_language=lambda: language_from_members(_language_dirs(db_path)),
    )


# ============================================================================
# DISCOVERY
# ============================================================================

def discover_local(root: str) -> List[DiscoveredDatabase]:
    """
    Discover every database container under root.

    Containers are never nested in the result: once a directory is a
    database its subtree is skipped, whether or not extraction succeeds.

    Raises:
        CatalogUnavailable: root is missing or unreadable
    """
    databases: List[DiscoveredDatabase] = []
    seen: Set[str] = set()

    def collect(path: str, extract: Callable[[str], DiscoveredDatabase]) -> None:
        with log_context(location=path, operation="extract"):
            try:
                db = extract(path)
            except (ParseSkipped, OSError) as e:
                logger.warning(f"Skipping container: {e}")
                return
        if db.location not in seen:
            seen.add(db.location)
            databases.append(db)

    def visit(path: str, is_dir: bool) -> WalkAction:
        if is_dir:
            if os.path.islink(path):
                return WalkAction.CONTINUE
            if not os.path.isfile(os.path.join(path, STRUCTURED_DESCRIPTOR)):
                return WalkAction.CONTINUE
            collect(path, extract_unarchived)
            return WalkAction.SKIP_SUBTREE

        if path.lower().endswith(ARCHIVE_EXTENSION):
            collect(path, extract_archived)
        return WalkAction.CONTINUE

    walk_namespace(root, visit)
    logger.debug(f"Local discovery found {len(databases)} databases under {root}")
    return databases


__all__ = [
    "walk_namespace",
    "directory_size",
    "extract_archived",
    "extract_unarchived",
    "discover_local",
]
