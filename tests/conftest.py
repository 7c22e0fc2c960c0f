# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - Builders for database trees, archives and blob doubles
# PURPOSE: Keep test modules focused on behavior
# CREATED: 10 OCT 2026
# ============================================================================
"""
Shared fixtures.

- write_descriptor / make_db_dir: unarchived databases on disk
- make_zip: archived databases
- FakeContainerClient: in-memory stand-in for azure ContainerClient
- ManualClock: controllable monotonic clock for cache tests
"""

import os
import zipfile
from types import SimpleNamespace
from typing import Dict, Optional

import pytest
from azure.core.exceptions import ResourceNotFoundError


# ============================================================================
# DESCRIPTORS
# ============================================================================

def descriptor_yaml(
    prefix: str = "/home/build/src/acme/widgets",
    language: Optional[str] = "java",
    sha: str = "0123456789abcdef0123456789abcdef01234567",
    cli_version: str = "2.15.0",
    creation_time: str = "2024-01-02T03:04:05.123456Z",
    with_creation: bool = True,
) -> str:
    lines = [f"sourceLocationPrefix: {prefix}", "baselineLinesOfCode: 1234"]
    if language is not None:
        lines.append(f"primaryLanguage: {language}")
    if with_creation:
        lines += [
            "creationMetadata:",
            f"  sha: {sha}",
            f"  cliVersion: {cli_version}",
            f"  creationTime: {creation_time}",
        ]
    return "\n".join(lines) + "\n"


def dbinfo_xml(prefix: str = "/opt/src") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<dbinfo><sourceLocationPrefix>{prefix}</sourceLocationPrefix></dbinfo>\n"
    )


def make_db_dir(root, rel: str, yml: str, languages=("java",)) -> str:
    """Create <root>/<rel> as an unarchived database; returns its path."""
    path = os.path.join(str(root), rel)
    os.makedirs(path, exist_ok=True)
    with open(os.path.join(path, "codeql-database.yml"), "w") as f:
        f.write(yml)
    for language in languages:
        lang_dir = os.path.join(path, f"db-{language}")
        os.makedirs(lang_dir, exist_ok=True)
        with open(os.path.join(lang_dir, "default.dbscheme"), "wb") as f:
            f.write(b"0123456789")
    return path


def make_zip(path, members: Dict[str, str]) -> str:
    """Write a zip archive with the given member name -> text."""
    with zipfile.ZipFile(str(path), "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return str(path)


def tree_size(path: str) -> int:
    total = 0
    for dirpath, _, filenames in os.walk(path):
        for filename in filenames:
            total += os.path.getsize(os.path.join(dirpath, filename))
    return total


# ============================================================================
# BLOB DOUBLES
# ============================================================================

class _FakeDownloader:
    def __init__(self, data: bytes, chunk_size: int = 4):
        self._data = data
        self._chunk_size = chunk_size

    def readall(self) -> bytes:
        return self._data

    def chunks(self):
        for offset in range(0, len(self._data), self._chunk_size):
            yield self._data[offset:offset + self._chunk_size]


class _FakeBlobClient:
    def __init__(self, container: "FakeContainerClient", name: str):
        self._container = container
        self._name = name

    def get_blob_properties(self):
        entry = self._container.lookup(self._name)
        return SimpleNamespace(
            name=self._name,
            size=len(entry["data"]),
            content_settings=SimpleNamespace(content_type=entry["content_type"]),
        )


class FakeContainerClient:
    """In-memory container with the ContainerClient methods BlobNamespace calls."""

    def __init__(self, blobs: Optional[Dict[str, bytes]] = None, container_name: str = "dbs"):
        self.container_name = container_name
        self.blobs: Dict[str, dict] = {}
        self.list_calls = []
        self.closed = 0
        for name, data in (blobs or {}).items():
            self.put(name, data)

    def put(self, name: str, data, content_type: Optional[str] = None) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.blobs[name] = {"data": data, "content_type": content_type}

    def lookup(self, name: str) -> dict:
        if name not in self.blobs:
            raise ResourceNotFoundError(f"The specified blob does not exist: {name}")
        return self.blobs[name]

    def list_blobs(self, name_starts_with=None):
        self.list_calls.append(name_starts_with)
        for name in sorted(self.blobs):
            if name_starts_with is None or name.startswith(name_starts_with):
                yield SimpleNamespace(name=name)

    def download_blob(self, name: str):
        return _FakeDownloader(self.lookup(name)["data"])

    def get_blob_client(self, name: str):
        return _FakeBlobClient(self, name)

    def close(self) -> None:
        self.closed += 1


# ============================================================================
# CLOCK
# ============================================================================

class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def db_root(tmp_path):
    root = tmp_path / "dbs"
    root.mkdir()
    return root
