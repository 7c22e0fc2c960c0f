# ============================================================================
# REMOTE DISCOVERY TESTS
# ============================================================================
# STATUS: Tests - Blob key scanning and candidate extraction
# PURPOSE: Verify discovery/remote.py over an in-memory container
# CREATED: 10 OCT 2026
# ============================================================================
"""
Remote Discovery Tests

Uses BlobNamespace over FakeContainerClient, so the azure error mapping
in infrastructure/storage.py is exercised too.

Run with:
    pytest tests/test_remote_discovery.py -v
"""

from unittest.mock import MagicMock

import pytest

from core.contracts import WalkAction
from core.errors import CatalogUnavailable, StorageError
from discovery.extractor import hash_location
from discovery.remote import candidate_locations, discover_remote, visit_candidates
from infrastructure.storage import BlobNamespace

from conftest import FakeContainerClient, descriptor_yaml


def _namespace(blobs):
    return BlobNamespace(FakeContainerClient(blobs))


class TestCandidateLocations:

    def test_descriptor_keys_become_locations(self):
        names = ["dbs/a/codeql-database.yml", "dbs/a/db-go/x", "dbs/b/codeql-database.yml"]
        assert candidate_locations(names, "dbs/") == ["dbs/a", "dbs/b"]

    def test_prefix_itself_is_not_a_candidate(self):
        assert candidate_locations(["dbs/codeql-database.yml"], "dbs/") == []

    def test_bare_descriptor_key_ignored(self):
        assert candidate_locations(["codeql-database.yml"]) == []


class TestVisitCandidates:

    def test_nested_candidates_skipped_after_prune(self):
        visited = []

        def visitor(location):
            visited.append(location)
            return WalkAction.SKIP_SUBTREE

        visit_candidates(["a", "a-b", "a/inner", "a/inner/deeper", "b"], visitor)

        assert visited == ["a", "a-b", "b"]

    def test_continue_keeps_nested(self):
        visited = []
        visit_candidates(["a", "a/inner"], lambda loc: visited.append(loc) or WalkAction.CONTINUE)
        assert visited == ["a", "a/inner"]


class TestDiscoverRemote:

    def test_prefix_scoping(self):
        """Only keys under the configured prefix are reported."""
        namespace = _namespace({
            "dbs/a/codeql-database.yml": descriptor_yaml(language=None),
            "dbs/a/db-go/default.dbscheme": "x",
            "other/b/codeql-database.yml": descriptor_yaml(),
        })

        [db] = discover_remote(namespace, "dbs/")

        assert db.location == "dbs/a"
        assert db.display_name == "a"
        assert db.language == "go"
        assert db.file_size_bytes == 0
        assert db.content_hash == hash_location("dbs/a")
        assert db.is_archived is False

    def test_descriptor_language_wins_without_listing(self):
        client = FakeContainerClient({"dbs/a/codeql-database.yml": descriptor_yaml(language="java")})

        [db] = discover_remote(BlobNamespace(client), "dbs/")

        assert db.language == "java"
        assert client.list_calls == ["dbs/"]

    def test_unknown_language_without_db_dirs(self):
        namespace = _namespace({"dbs/a/codeql-database.yml": descriptor_yaml(language=None)})
        [db] = discover_remote(namespace, "dbs/")
        assert db.language == "unknown"

    def test_nested_database_not_reported(self):
        namespace = _namespace({
            "dbs/a/codeql-database.yml": descriptor_yaml(),
            "dbs/a/inner/codeql-database.yml": descriptor_yaml(),
        })

        assert [db.location for db in discover_remote(namespace, "dbs/")] == ["dbs/a"]

    def test_bad_descriptor_skipped(self):
        namespace = _namespace({
            "dbs/a/codeql-database.yml": "sourceLocationPrefix: [unclosed\n",
            "dbs/b/codeql-database.yml": descriptor_yaml(),
        })

        assert [db.location for db in discover_remote(namespace, "dbs/")] == ["dbs/b"]

    def test_archives_not_inspected(self):
        namespace = _namespace({"dbs/widgets.zip": b"PK..."})
        assert discover_remote(namespace, "dbs/") == []

    def test_listing_failure(self):
        namespace = MagicMock()
        namespace.list_names.side_effect = StorageError("listing failed")

        with pytest.raises(CatalogUnavailable):
            discover_remote(namespace, "dbs/")
