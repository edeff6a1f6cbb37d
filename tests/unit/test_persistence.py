"""Unit tests for uigen.persistence module."""

import json

import pytest

from tests.helpers import assert_trees_equal
from uigen.exceptions import MalformedSnapshotError
from uigen.filesystem import FileTree
from uigen.persistence import ProjectStore, _sanitize_project_id


@pytest.mark.unit
@pytest.mark.persistence
class TestSanitizeProjectId:
    """Tests for project id sanitization."""

    @pytest.mark.parametrize("project_id", ["landing-page", "proj_1", "v1.2", "A"])
    def test_valid_ids(self, project_id):
        """Test safe identifiers pass through."""
        assert _sanitize_project_id(project_id) == project_id

    def test_whitespace_stripped(self):
        """Test surrounding whitespace is removed."""
        assert _sanitize_project_id("  demo  ") == "demo"

    @pytest.mark.parametrize(
        "project_id",
        ["", "   ", "../etc/passwd", "a/b", "..", ".hidden", "a..b", "index", "CON", "x" * 65],
    )
    def test_unsafe_ids(self, project_id):
        """Test unsafe identifiers raise ValueError."""
        with pytest.raises(ValueError):
            _sanitize_project_id(project_id)


@pytest.mark.unit
@pytest.mark.persistence
class TestProjectStore:
    """Tests for ProjectStore."""

    def test_init_creates_index(self, tmp_path):
        """Test the storage directory and index are created."""
        store = ProjectStore(tmp_path / "new" / "projects")

        assert store.index_file.exists()
        assert store.list_projects() == []

    def test_save_and_load(self, project_store, populated_tree):
        """Test a saved project loads back with its metadata."""
        metadata = {"messages": [{"role": "user", "content": "make a button"}]}

        path = project_store.save_project("demo", populated_tree, metadata=metadata)
        tree, loaded_metadata = project_store.load_project("demo")

        assert path.name == "demo.json"
        assert_trees_equal(tree, populated_tree)
        assert loaded_metadata == metadata

    def test_saved_file_format(self, project_store, populated_tree):
        """Test the project file carries the snapshot and timestamps."""
        path = project_store.save_project("demo", populated_tree)

        data = json.loads(path.read_text())

        assert data["project_id"] == "demo"
        assert data["file_count"] == 4
        assert data["snapshot"]["version"] == 1
        assert data["metadata"] == {}
        assert "created_at" in data and "updated_at" in data

    def test_resave_keeps_created_at(self, project_store, tree):
        """Test saving again updates the project but keeps created_at."""
        project_store.save_project("demo", tree)
        created_at = project_store.list_projects()[0]["created_at"]

        tree.create_file("/App.jsx", "x")
        project_store.save_project("demo", tree)

        projects = project_store.list_projects()
        assert len(projects) == 1
        assert projects[0]["created_at"] == created_at
        assert projects[0]["file_count"] == 1

    def test_index_survives_reopen(self, tmp_path, tree):
        """Test a new store instance reads the existing index."""
        ProjectStore(tmp_path / "projects").save_project("demo", tree)

        reopened = ProjectStore(tmp_path / "projects")

        assert [p["project_id"] for p in reopened.list_projects()] == ["demo"]

    def test_corrupt_index_starts_fresh(self, tmp_path):
        """Test an unreadable index is replaced by an empty one."""
        storage = tmp_path / "projects"
        storage.mkdir()
        (storage / "index.json").write_text("{broken")

        store = ProjectStore(storage)

        assert store.list_projects() == []

    def test_load_missing(self, project_store):
        """Test loading an unknown project raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            project_store.load_project("missing")

    def test_load_unsafe_id(self, project_store):
        """Test unsafe identifiers are rejected before touching disk."""
        with pytest.raises(ValueError):
            project_store.load_project("../secrets")

    def test_load_malformed_snapshot(self, project_store, tmp_path):
        """Test a corrupt snapshot raises MalformedSnapshotError."""
        (project_store.storage_dir / "broken.json").write_text(
            json.dumps({"snapshot": {"version": 1, "entries": [{"path": "/a/../b", "type": "file"}]}})
        )

        with pytest.raises(MalformedSnapshotError):
            project_store.load_project("broken")

    def test_load_invalid_json(self, project_store):
        """Test a project file that is not JSON raises MalformedSnapshotError."""
        (project_store.storage_dir / "garbage.json").write_text("not json")

        with pytest.raises(MalformedSnapshotError):
            project_store.load_project("garbage")

    def test_load_or_empty_missing(self, project_store):
        """Test a missing project falls back to an empty tree."""
        tree, metadata = project_store.load_project_or_empty("missing")

        assert isinstance(tree, FileTree)
        assert len(tree) == 0
        assert metadata == {}

    def test_load_or_empty_malformed(self, project_store, caplog):
        """Test a malformed snapshot falls back to an empty tree with a warning."""
        (project_store.storage_dir / "broken.json").write_text(json.dumps({"metadata": {}}))

        with caplog.at_level("WARNING", logger="uigen.persistence"):
            tree, metadata = project_store.load_project_or_empty("broken")

        assert len(tree) == 0
        assert "Discarding malformed snapshot" in caplog.text

    def test_strict_store_rejects_undeclared_parents(self, strict_project_store):
        """Test the store honours its codec's decode policy."""
        (strict_project_store.storage_dir / "loose.json").write_text(
            json.dumps({"snapshot": [{"path": "/a/b.js", "type": "file", "content": ""}]})
        )

        with pytest.raises(MalformedSnapshotError):
            strict_project_store.load_project("loose")

    def test_list_most_recent_first(self, project_store, tree):
        """Test projects are listed by updated_at, newest first."""
        project_store.save_project("first", tree)
        project_store.save_project("second", tree)
        project_store.index["projects"]["first"]["updated_at"] = "2000-01-01T00:00:00"

        assert [p["project_id"] for p in project_store.list_projects()] == ["second", "first"]

    def test_delete(self, project_store, tree):
        """Test delete removes the file and the index entry."""
        path = project_store.save_project("demo", tree)

        project_store.delete_project("demo")

        assert not path.exists()
        assert project_store.list_projects() == []

    def test_delete_missing(self, project_store):
        """Test deleting an unknown project raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            project_store.delete_project("missing")
