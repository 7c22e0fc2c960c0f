# ============================================================================
# METADATA EXTRACTOR
# ============================================================================
# STATUS: Discovery - Pure descriptor parsing and metadata derivation
# PURPOSE: Turn descriptor bytes and member names into catalog metadata
# CREATED: 07 OCT 2026
# ============================================================================
"""
Metadata Extractor

Pure functions, no I/O. Discovery modules read the bytes and member
names; everything derived from them happens here:

- Descriptor detection and parsing (codeql-database.yml, legacy .dbinfo)
- Language inference from db-<language> members
- Owner/repo inference as an ordered chain of tiers
- Content hash and build CID derivation
- Projection into the DatabaseMetadata wire record
"""

import hashlib
import posixpath
import xml.etree.ElementTree as ET
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

import yaml

from core.contracts import (
    BUILD_CID_LENGTH,
    GENERIC_OWNERS,
    GIT_BRANCH,
    LANGUAGE_DIR_PREFIX,
    LEGACY_DESCRIPTOR,
    STRUCTURED_DESCRIPTOR,
    TOOL_NAME,
    UNKNOWN,
    DescriptorFormat,
)
from core.errors import ParseSkipped
from core.models import (
    CreationMetadata,
    DatabaseMetadata,
    DescriptorInfo,
    DiscoveredDatabase,
)


# ============================================================================
# DESCRIPTOR PARSING
# ============================================================================

class _DescriptorLoader(yaml.SafeLoader):
    """SafeLoader that keeps numbers, booleans and timestamps as the text in the file."""


_DescriptorLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers
        if tag not in (
            "tag:yaml.org,2002:timestamp",
            "tag:yaml.org,2002:int",
            "tag:yaml.org,2002:float",
            "tag:yaml.org,2002:bool",
        )
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _scalar(document: Dict[str, Any], key: str) -> str:
    value = document.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ParseSkipped(f"{STRUCTURED_DESCRIPTOR}: '{key}' must be a scalar")
    return str(value).strip()


def find_descriptor(member_names: Iterable[str]) -> Optional[Tuple[DescriptorFormat, str]]:
    """
    Pick the descriptor member of a container.

    The structured descriptor wins whenever present; the legacy one is
    only a fallback.

    Returns:
        (format, member name) or None if the container has neither
    """
    structured = None
    legacy = None
    for name in member_names:
        base = name.rstrip("/").rsplit("/", 1)[-1]
        if base == STRUCTURED_DESCRIPTOR and structured is None:
            structured = name
        elif base == LEGACY_DESCRIPTOR and legacy is None:
            legacy = name

    if structured is not None:
        return DescriptorFormat.STRUCTURED, structured
    if legacy is not None:
        return DescriptorFormat.LEGACY, legacy
    return None


def parse_structured_descriptor(data: bytes) -> DescriptorInfo:
    """
    Parse codeql-database.yml.

    creation_metadata is set exactly when the document carries a
    creationMetadata mapping.

    Raises:
        ParseSkipped: bytes are not a YAML mapping
    """
    try:
        document = yaml.load(data, Loader=_DescriptorLoader)
    except yaml.YAMLError as e:
        raise ParseSkipped(f"failed to parse {STRUCTURED_DESCRIPTOR}: {e}") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ParseSkipped(f"failed to parse {STRUCTURED_DESCRIPTOR}: not a mapping")

    creation = document.get("creationMetadata")
    creation_metadata = None
    if isinstance(creation, dict):
        creation_metadata = CreationMetadata(
            sha=_scalar(creation, "sha"),
            cli_version=_scalar(creation, "cliVersion"),
            creation_time=_scalar(creation, "creationTime"),
        )
    elif creation is not None:
        raise ParseSkipped(f"{STRUCTURED_DESCRIPTOR}: 'creationMetadata' must be a mapping")

    return DescriptorInfo(
        source_location_prefix=_scalar(document, "sourceLocationPrefix"),
        primary_language=_scalar(document, "primaryLanguage"),
        creation_metadata=creation_metadata,
    )


def parse_legacy_descriptor(data: bytes) -> DescriptorInfo:
    """
    Parse the XML .dbinfo written by old CodeQL releases.

    Only sourceLocationPrefix exists in this format.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ParseSkipped(f"failed to parse {LEGACY_DESCRIPTOR}: {e}") from e

    if root.tag != "dbinfo":
        raise ParseSkipped(f"failed to parse {LEGACY_DESCRIPTOR}: unexpected root <{root.tag}>")

    prefix = root.findtext("sourceLocationPrefix", default="")
    return DescriptorInfo(source_location_prefix=prefix.strip())


def parse_descriptor(fmt: DescriptorFormat, data: bytes) -> DescriptorInfo:
    """Dispatch to the parser for a descriptor generation."""
    if fmt == DescriptorFormat.STRUCTURED:
        return parse_structured_descriptor(data)
    return parse_legacy_descriptor(data)


# ============================================================================
# LANGUAGE INFERENCE
# ============================================================================

def language_from_members(member_names: Iterable[str]) -> str:
    """
    Infer the language from db-<language> path components.

    Returns the suffix of the first matching component, or "unknown".
    """
    for name in member_names:
        for part in name.split("/"):
            if part.startswith(LANGUAGE_DIR_PREFIX) and len(part) > len(LANGUAGE_DIR_PREFIX):
                return part[len(LANGUAGE_DIR_PREFIX):]
    return UNKNOWN


# ============================================================================
# OWNERSHIP CHAIN
# ============================================================================
# Each tier returns (owner, repo) with "unknown" where it has no answer.
# resolve_owner_repo composes them top-down.

def owner_repo_from_prefix(source_location_prefix: str) -> Tuple[str, str]:
    """
    Owner and repo from the last two segments of the source path.

    "/home/x/src/acme/widgets" -> ("acme", "widgets")
    "/widgets"                 -> ("unknown", "widgets")
    "" or "/"                  -> ("unknown", "unknown")
    """
    if not source_location_prefix:
        return UNKNOWN, UNKNOWN

    cleaned = posixpath.normpath(source_location_prefix.replace("\\", "/"))
    segments = [segment for segment in cleaned.split("/") if segment]

    if len(segments) >= 2:
        return segments[-2], segments[-1]
    if len(segments) == 1:
        return UNKNOWN, segments[0]
    return UNKNOWN, UNKNOWN


def owner_repo_from_filename(filename: str) -> Tuple[str, str]:
    """
    Owner and repo from an archive name like owner_repo_lang-....zip.

    Splits on "_" first, then "-"; the first two tokens win.
    """
    name = filename
    for extension in (".zip", ".tar.gz", ".tgz"):
        if name.endswith(extension):
            name = name[: -len(extension)]

    for separator in ("_", "-"):
        tokens = name.split(separator)
        if len(tokens) >= 2:
            return tokens[0], tokens[1]

    return UNKNOWN, UNKNOWN


def resolve_owner_repo(
    source_location_prefix: str,
    filename: Optional[str] = None,
) -> Tuple[str, str]:
    """
    Run the ownership chain.

    The filename tier only runs when a filename is given (legacy
    containers) and the prefix tier produced a generic owner.
    """
    owner, repo = owner_repo_from_prefix(source_location_prefix)
    if filename is None or owner not in GENERIC_OWNERS:
        return owner, repo

    filename_owner, filename_repo = owner_repo_from_filename(filename)
    if filename_owner != UNKNOWN:
        owner = filename_owner
    if filename_repo != UNKNOWN:
        repo = filename_repo
    return owner, repo


# ============================================================================
# IDENTIFIERS
# ============================================================================

def hash_chunks(chunks: Iterable[bytes]) -> str:
    """SHA-256 hex digest over a byte stream."""
    digest = hashlib.sha256()
    for chunk in chunks:
        digest.update(chunk)
    return digest.hexdigest()


def hash_location(location: str) -> str:
    """Content hash surrogate for unarchived containers."""
    return hashlib.sha256(location.encode("utf-8")).hexdigest()


def build_cid(cli_version: str, creation_time: str, language: str, source_sha: str) -> str:
    """Build context identifier: truncated SHA-256 of the four build inputs."""
    material = f"{cli_version} {creation_time} {language} {source_sha}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()[:BUILD_CID_LENGTH]


# ============================================================================
# ASSEMBLY & PROJECTION
# ============================================================================

def assemble_database(
    *,
    location: str,
    display_name: str,
    is_archived: bool,
    info: DescriptorInfo,
    fmt: DescriptorFormat,
    content_hash: str,
    file_size_bytes: int,
    infer_language: Callable[[], str],
) -> DiscoveredDatabase:
    """
    Combine a parsed descriptor with what discovery measured.

    infer_language is only called when the descriptor has no
    primaryLanguage (it may cost a remote listing).
    """
    language = info.primary_language or infer_language() or UNKNOWN

    legacy_filename = display_name if fmt == DescriptorFormat.LEGACY else None
    owner, repo = resolve_owner_repo(info.source_location_prefix, legacy_filename)

    return DiscoveredDatabase(
        location=location,
        display_name=display_name,
        is_archived=is_archived,
        content_hash=content_hash,
        language=language,
        source_location_prefix=info.source_location_prefix,
        creation_metadata=info.creation_metadata if fmt == DescriptorFormat.STRUCTURED else None,
        file_size_bytes=file_size_bytes,
        owner=owner,
        repo=repo,
    )


def project_metadata(
    db: DiscoveredDatabase,
    endpoint_url: str,
    relative_location: str,
) -> DatabaseMetadata:
    """Project a discovered database into its catalog record."""
    creation = db.creation_metadata
    if creation is not None:
        cid = build_cid(creation.cli_version, creation.creation_time, db.language, creation.sha)
    else:
        cid = db.content_hash[:BUILD_CID_LENGTH]

    if db.language and db.language != UNKNOWN:
        tool_name = f"{TOOL_NAME}-{db.language}"
    else:
        tool_name = TOOL_NAME

    return DatabaseMetadata(
        content_hash=db.content_hash,
        build_cid=cid,
        git_branch=GIT_BRANCH,
        git_commit_id=creation.sha if creation else "",
        git_owner=db.owner,
        git_repo=db.repo,
        ingestion_datetime_utc=creation.creation_time if creation else "",
        primary_language=db.language,
        result_url=f"{endpoint_url.rstrip('/')}/db/{relative_location}",
        tool_name=tool_name,
        tool_version=creation.cli_version if creation else "",
        projname=f"{db.owner}/{db.repo}",
        db_file_size=db.file_size_bytes,
    )


__all__ = [
    "find_descriptor",
    "parse_structured_descriptor",
    "parse_legacy_descriptor",
    "parse_descriptor",
    "language_from_members",
    "owner_repo_from_prefix",
    "owner_repo_from_filename",
    "resolve_owner_repo",
    "hash_chunks",
    "hash_location",
    "build_cid",
    "assemble_database",
    "project_metadata",
]
