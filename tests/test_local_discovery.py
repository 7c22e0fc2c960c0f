# ============================================================================
# LOCAL DISCOVERY TESTS
# ============================================================================
# STATUS: Tests - Filesystem walk, archived and unarchived extraction
# PURPOSE: Verify discovery/local.py against real trees under tmp_path
# CREATED: 10 OCT 2026
# ============================================================================
"""
Local Discovery Tests

Run with:
    pytest tests/test_local_discovery.py -v
"""

import hashlib
import os

import pytest

from core.contracts import WalkAction
from core.errors import CatalogUnavailable
from discovery.extractor import hash_location
from discovery.local import discover_local, directory_size, walk_namespace

from conftest import dbinfo_xml, descriptor_yaml, make_db_dir, make_zip, tree_size


def _by_name(databases):
    return {db.display_name: db for db in databases}


# ============================================================================
# WALK
# ============================================================================

class TestWalkNamespace:

    def test_root_not_visited(self, db_root):
        (db_root / "a").mkdir()
        visited = []
        walk_namespace(str(db_root), lambda path, is_dir: visited.append(path) or WalkAction.CONTINUE)
        assert str(db_root) not in visited
        assert os.path.join(str(db_root), "a") in visited

    def test_skip_subtree_prunes_children(self, db_root):
        (db_root / "keep" / "child").mkdir(parents=True)
        (db_root / "skip" / "child").mkdir(parents=True)
        visited = []

        def visitor(path, is_dir):
            visited.append(os.path.relpath(path, str(db_root)))
            return WalkAction.SKIP_SUBTREE if path.endswith("skip") else WalkAction.CONTINUE

        walk_namespace(str(db_root), visitor)

        assert os.path.join("keep", "child") in visited
        assert "skip" in visited
        assert os.path.join("skip", "child") not in visited

    def test_missing_root(self, tmp_path):
        with pytest.raises(CatalogUnavailable):
            walk_namespace(str(tmp_path / "absent"), lambda path, is_dir: WalkAction.CONTINUE)


# ============================================================================
# UNARCHIVED
# ============================================================================

class TestUnarchivedDiscovery:

    def test_directory_database(self, db_root):
        path = make_db_dir(db_root, "proj", descriptor_yaml())

        [db] = discover_local(str(db_root))

        assert db.location == path
        assert db.display_name == "proj"
        assert db.is_archived is False
        assert db.language == "java"
        assert (db.owner, db.repo) == ("acme", "widgets")
        assert db.content_hash == hash_location(path)
        assert db.file_size_bytes == tree_size(path)
        assert db.creation_metadata.cli_version == "2.15.0"

    def test_nested_database_not_reported(self, db_root):
        outer = make_db_dir(db_root, "proj", descriptor_yaml())
        make_db_dir(outer, "nested", descriptor_yaml(prefix="/x/other/thing"))

        databases = discover_local(str(db_root))

        assert [db.location for db in databases] == [outer]

    def test_language_from_subdirectory(self, db_root):
        make_db_dir(db_root, "proj", descriptor_yaml(language=None), languages=("python",))

        [db] = discover_local(str(db_root))

        assert db.language == "python"

    def test_broken_descriptor_skipped_and_pruned(self, db_root):
        broken = os.path.join(str(db_root), "broken")
        os.makedirs(broken)
        with open(os.path.join(broken, "codeql-database.yml"), "w") as f:
            f.write("sourceLocationPrefix: [unclosed\n")
        make_db_dir(broken, "inner", descriptor_yaml())
        good = make_db_dir(db_root, "good", descriptor_yaml())

        databases = discover_local(str(db_root))

        assert [db.location for db in databases] == [good]


# ============================================================================
# ARCHIVED
# ============================================================================

class TestArchivedDiscovery:

    def test_legacy_archive(self, db_root):
        zip_path = make_zip(db_root / "u-boot_u-boot_cpp.zip", {
            "u-boot/.dbinfo": dbinfo_xml("/opt/src"),
            "u-boot/db-cpp/default.dbscheme": "scheme",
        })

        [db] = discover_local(str(db_root))

        with open(zip_path, "rb") as f:
            expected_hash = hashlib.sha256(f.read()).hexdigest()
        assert db.location == zip_path
        assert db.is_archived is True
        assert db.language == "cpp"
        assert (db.owner, db.repo) == ("u-boot", "u-boot")
        assert db.content_hash == expected_hash
        assert db.file_size_bytes == os.path.getsize(zip_path)
        assert db.creation_metadata is None

    def test_structured_archive(self, db_root):
        make_zip(db_root / "widgets.zip", {
            "widgets/codeql-database.yml": descriptor_yaml(language="go"),
            "widgets/db-go/x": "",
        })

        [db] = discover_local(str(db_root))

        assert db.language == "go"
        assert (db.owner, db.repo) == ("acme", "widgets")
        assert db.creation_metadata is not None

    def test_extension_is_case_insensitive(self, db_root):
        make_zip(db_root / "WIDGETS.ZIP", {"w/codeql-database.yml": descriptor_yaml()})

        assert [db.display_name for db in discover_local(str(db_root))] == ["WIDGETS.ZIP"]

    def test_archive_without_descriptor_skipped(self, db_root):
        make_zip(db_root / "sources.zip", {"src/main.c": "int main;"})

        assert discover_local(str(db_root)) == []

    def test_corrupt_archive_skipped(self, db_root):
        (db_root / "corrupt.zip").write_bytes(b"PK\x03\x04 not really a zip")
        make_db_dir(db_root, "proj", descriptor_yaml())

        assert list(_by_name(discover_local(str(db_root)))) == ["proj"]


# ============================================================================
# MIXED TREE
# ============================================================================

class TestMixedTree:

    def test_archives_and_directories_together(self, db_root):
        make_db_dir(db_root, "team/proj", descriptor_yaml())
        make_zip(db_root / "team" / "other.zip", {"o/codeql-database.yml": descriptor_yaml(prefix="/a/b/c")})
        (db_root / "team" / "notes.txt").write_text("hello")

        found = _by_name(discover_local(str(db_root)))

        assert sorted(found) == ["other.zip", "proj"]
        assert (found["other.zip"].owner, found["other.zip"].repo) == ("b", "c")

    def test_empty_root(self, db_root):
        assert discover_local(str(db_root)) == []


class TestDirectorySize:

    def test_sums_files_recursively(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "x").write_bytes(b"12345")
        (tmp_path / "y").write_bytes(b"123")
        assert directory_size(str(tmp_path)) == 8
