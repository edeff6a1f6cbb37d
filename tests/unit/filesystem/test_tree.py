"""Unit tests for uigen.filesystem.tree module.

Covers:
1. File and directory creation (mkdir -p semantics, idempotent create)
2. Reads and queries (read_file, list, stat, walk, summary)
3. write_file, delete and rename semantics
4. Atomicity: failing operations leave the tree unchanged
5. Change events
"""

import pytest

from tests.helpers import assert_tree_unchanged
from uigen.codec import TreeCodec
from uigen.events import TreeEventType
from uigen.exceptions import (
    InvalidOperationError,
    InvalidPathError,
    NotFoundError,
    PathConflictError,
)
from uigen.filesystem import EntryKind, FileTree

# ============================================================================
# Test Class: Creation
# ============================================================================


@pytest.mark.unit
@pytest.mark.filesystem
class TestCreate:
    """Tests for create_file and create_directory."""

    def test_new_tree_has_only_root(self, tree):
        """Test a fresh tree contains just the root directory."""
        assert len(tree) == 0
        assert tree.exists("/")
        assert tree.stat("/") is EntryKind.DIRECTORY
        assert tree.list() == []

    def test_create_file_creates_parents(self, tree):
        """Test create_file creates intermediate directories."""
        entry = tree.create_file("src/components/Button.jsx", "button")

        assert entry.path == "/src/components/Button.jsx"
        assert tree.stat("/src") is EntryKind.DIRECTORY
        assert tree.stat("/src/components") is EntryKind.DIRECTORY
        assert tree.read_file("/src/components/Button.jsx") == "button"

    def test_create_file_twice_is_idempotent(self, tree):
        """Test identical create twice leaves exactly one entry."""
        tree.create_file("/App.jsx", "X")
        tree.create_file("/App.jsx", "X")

        assert tree.list("/") == ["App.jsx"]
        assert len(tree) == 1
        assert tree.read_file("/App.jsx") == "X"

    def test_create_file_overwrites_content(self, tree):
        """Test creating an existing file replaces its content."""
        tree.create_file("/App.jsx", "old")
        tree.create_file("/App.jsx", "new")

        assert tree.read_file("/App.jsx") == "new"

    def test_create_file_over_directory_conflicts(self, tree):
        """Test a file cannot replace a directory."""
        tree.create_directory("/src")

        with pytest.raises(PathConflictError):
            tree.create_file("/src", "content")

    def test_create_file_under_file_conflicts(self, tree):
        """Test a file path component cannot be an existing file."""
        tree.create_file("/a", "file")

        with pytest.raises(PathConflictError):
            tree.create_file("/a/b.txt", "nested")

    def test_create_directory_idempotent(self, tree):
        """Test creating an existing directory returns it."""
        first = tree.create_directory("/src/lib")
        second = tree.create_directory("/src/lib")

        assert first is second
        assert tree.list("/src") == ["lib"]

    def test_create_directory_over_file_conflicts(self, tree):
        """Test a directory cannot replace a file."""
        tree.create_file("/a", "file")

        with pytest.raises(PathConflictError):
            tree.create_directory("/a")

    def test_invalid_path_rejected(self, tree):
        """Test invalid paths are rejected before anything is created."""
        with pytest.raises(InvalidPathError):
            tree.create_file("/a/../b", "x")

        assert len(tree) == 0


# ============================================================================
# Test Class: Queries
# ============================================================================


@pytest.mark.unit
@pytest.mark.filesystem
class TestQueries:
    """Tests for read_file, list, stat, walk and summary."""

    def test_read_missing_file(self, tree):
        """Test reading an absent file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            tree.read_file("/missing.js")

    def test_read_directory_is_not_found(self, populated_tree):
        """Test reading a directory raises NotFoundError."""
        with pytest.raises(NotFoundError, match="directory"):
            populated_tree.read_file("/components")

    def test_list_sorted(self, populated_tree):
        """Test list returns child names sorted lexically."""
        assert populated_tree.list() == ["App.jsx", "components", "styles"]
        assert populated_tree.list("/components") == ["Button.jsx", "Card.jsx"]

    def test_list_missing_or_file(self, populated_tree):
        """Test listing a missing path or a file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            populated_tree.list("/nope")
        with pytest.raises(NotFoundError):
            populated_tree.list("/App.jsx")

    def test_stat_missing(self, tree):
        """Test stat of a missing path raises NotFoundError."""
        with pytest.raises(NotFoundError):
            tree.stat("/missing")

    def test_exists(self, populated_tree):
        """Test exists normalizes its input."""
        assert populated_tree.exists("components//Card.jsx")
        assert not populated_tree.exists("/components/Missing.jsx")

    def test_contains(self, populated_tree):
        """Test membership never raises for invalid paths."""
        assert "/App.jsx" in populated_tree
        assert "/a/../b" not in populated_tree
        assert 42 not in populated_tree

    def test_walk_preorder(self, populated_tree):
        """Test walk yields entries in sorted pre-order."""
        assert [entry.path for entry in populated_tree.walk()] == [
            "/App.jsx",
            "/components",
            "/components/Button.jsx",
            "/components/Card.jsx",
            "/styles",
            "/styles/index.css",
        ]

    def test_walk_subdirectory(self, populated_tree):
        """Test walk below a directory excludes the start."""
        assert [entry.path for entry in populated_tree.walk("/styles")] == ["/styles/index.css"]

    def test_summary(self, populated_tree):
        """Test summary counts files and directories."""
        summary = populated_tree.summary()

        assert summary["files"] == 4
        assert summary["directories"] == 2
        assert summary["paths"] == [
            "/App.jsx",
            "/components/Button.jsx",
            "/components/Card.jsx",
            "/styles/index.css",
        ]

    def test_files_mapping(self, tree):
        """Test files returns path to content for every file."""
        tree.create_file("/a/b.txt", "b")
        tree.create_directory("/empty")

        assert tree.files() == {"/a/b.txt": "b"}

    def test_entry_invariants(self, populated_tree):
        """Test files have no children and directories have no content."""
        for entry in populated_tree.walk():
            if entry.is_file:
                assert entry.children == {}
            else:
                assert entry.content is None


# ============================================================================
# Test Class: write_file
# ============================================================================


@pytest.mark.unit
@pytest.mark.filesystem
class TestWriteFile:
    """Tests for write_file."""

    def test_write_existing_file(self, populated_tree):
        """Test write_file replaces content of an existing file."""
        populated_tree.write_file("/App.jsx", "new")

        assert populated_tree.read_file("/App.jsx") == "new"

    def test_write_new_file_in_existing_directory(self, populated_tree):
        """Test write_file can create a file when its parent exists."""
        populated_tree.write_file("/components/Modal.jsx", "modal")

        assert populated_tree.read_file("/components/Modal.jsx") == "modal"

    def test_write_does_not_create_parents(self, tree):
        """Test write_file fails when the parent chain is missing."""
        with pytest.raises(NotFoundError):
            tree.write_file("/missing/dir/file.txt", "x")

        assert len(tree) == 0

    def test_write_to_directory_conflicts(self, populated_tree):
        """Test write_file cannot replace a directory."""
        with pytest.raises(PathConflictError):
            populated_tree.write_file("/components", "x")


# ============================================================================
# Test Class: delete
# ============================================================================


@pytest.mark.unit
@pytest.mark.filesystem
class TestDelete:
    """Tests for delete."""

    def test_delete_file(self, populated_tree):
        """Test deleting a file removes only that file."""
        populated_tree.delete("/App.jsx")

        assert not populated_tree.exists("/App.jsx")
        assert populated_tree.exists("/components")

    def test_directory_deletion_cascades(self, tree):
        """Test deleting a directory removes its whole subtree."""
        tree.create_file("/a/b.txt", "b")
        tree.create_file("/a/c.txt", "c")

        tree.delete("/a")

        assert not tree.exists("/a")
        assert not tree.exists("/a/b.txt")
        assert not tree.exists("/a/c.txt")
        assert len(tree) == 0

    def test_delete_missing(self, tree):
        """Test deleting an absent path raises NotFoundError."""
        with pytest.raises(NotFoundError):
            tree.delete("/missing")

    def test_delete_root_rejected(self, populated_tree):
        """Test deleting the root raises InvalidOperationError."""
        with pytest.raises(InvalidOperationError):
            populated_tree.delete("/")


# ============================================================================
# Test Class: rename
# ============================================================================


@pytest.mark.unit
@pytest.mark.filesystem
class TestRename:
    """Tests for rename."""

    def test_rename_file(self, populated_tree):
        """Test renaming a file moves its content."""
        entry = populated_tree.rename("/App.jsx", "/Main.jsx")

        assert entry.path == "/Main.jsx"
        assert populated_tree.read_file("/Main.jsx").startswith("import Button")
        assert not populated_tree.exists("/App.jsx")

    def test_rename_directory_moves_subtree(self, populated_tree):
        """Test renaming a directory rebases every descendant."""
        populated_tree.rename("/components", "/ui")

        assert populated_tree.list("/ui") == ["Button.jsx", "Card.jsx"]
        assert populated_tree.get_entry("/ui/Button.jsx").path == "/ui/Button.jsx"
        assert not populated_tree.exists("/components/Button.jsx")

    def test_rename_creates_destination_parents(self, populated_tree):
        """Test missing destination directories are created."""
        populated_tree.rename("/styles/index.css", "/src/styles/main.css")

        assert populated_tree.stat("/src/styles") is EntryKind.DIRECTORY
        assert populated_tree.read_file("/src/styles/main.css") == "body { margin: 0; }\n"

    def test_rename_cycle_rejected(self, tree):
        """Test moving a directory into its own subtree fails."""
        tree.create_directory("/a")

        with pytest.raises(InvalidOperationError):
            tree.rename("/a", "/a/b")

    def test_rename_missing_source(self, tree):
        """Test renaming an absent path raises NotFoundError."""
        with pytest.raises(NotFoundError):
            tree.rename("/missing", "/other")

    def test_rename_onto_existing(self, populated_tree):
        """Test renaming onto an existing entry raises PathConflictError."""
        with pytest.raises(PathConflictError):
            populated_tree.rename("/components/Button.jsx", "/components/Card.jsx")

    def test_rename_root_rejected(self, populated_tree):
        """Test renaming the root raises InvalidOperationError."""
        with pytest.raises(InvalidOperationError):
            populated_tree.rename("/", "/root")

    def test_rename_under_file_conflicts(self, populated_tree):
        """Test a destination whose parent is a file raises PathConflictError."""
        with pytest.raises(PathConflictError):
            populated_tree.rename("/styles", "/App.jsx/styles")


# ============================================================================
# Test Class: Atomicity and uniqueness
# ============================================================================


@pytest.mark.unit
@pytest.mark.filesystem
class TestAtomicity:
    """Failing operations leave the encoded tree byte-identical."""

    @pytest.mark.parametrize(
        "operation",
        [
            lambda t: t.create_file("/components", "x"),
            lambda t: t.create_file("/App.jsx/child.js", "x"),
            lambda t: t.create_directory("/App.jsx"),
            lambda t: t.write_file("/nope/file.js", "x"),
            lambda t: t.delete("/"),
            lambda t: t.delete("/missing"),
            lambda t: t.rename("/components", "/components/inner"),
            lambda t: t.rename("/components", "/styles"),
            lambda t: t.rename("/styles", "/App.jsx/deep/styles"),
            lambda t: t.rename("/missing", "/other"),
        ],
    )
    def test_failed_operation_leaves_tree_unchanged(self, populated_tree, operation):
        """Test a failing mutation has no visible effect."""
        before = TreeCodec().encode_json(populated_tree)

        with pytest.raises(Exception):
            operation(populated_tree)

        assert_tree_unchanged(populated_tree, before)

    def test_paths_stay_unique(self, tree):
        """Test no two entries share a path after a mixed sequence."""
        tree.create_file("/a/b.txt", "1")
        tree.create_file("/a/b.txt", "2")
        tree.rename("/a", "/c")
        tree.create_file("/a/b.txt", "3")
        tree.create_directory("/c")
        tree.rename("/c/b.txt", "/a/d.txt")

        all_paths = [entry.path for entry in tree.walk()]
        assert len(all_paths) == len(set(all_paths))
        assert all_paths == ["/a", "/a/b.txt", "/a/d.txt", "/c"]

    def test_clear(self, populated_tree):
        """Test clear removes everything but the root."""
        populated_tree.clear()

        assert len(populated_tree) == 0
        assert populated_tree.list() == []


# ============================================================================
# Test Class: Events
# ============================================================================


@pytest.mark.unit
@pytest.mark.filesystem
class TestTreeEvents:
    """Tests for change notifications emitted by the tree."""

    def test_create_emits_for_parents_and_file(self, event_bus, recorder):
        """Test created events for auto-created parents then the file."""
        tree = FileTree(events=event_bus)
        tree.create_file("/src/App.jsx", "x")

        assert [(e.type, e.path) for e in recorder.events] == [
            (TreeEventType.CREATED, "/src"),
            (TreeEventType.CREATED, "/src/App.jsx"),
        ]

    def test_identical_create_emits_nothing(self, event_bus, recorder):
        """Test re-delivering an identical create is silent."""
        tree = FileTree(events=event_bus)
        tree.create_file("/App.jsx", "x")
        tree.create_file("/App.jsx", "x")

        assert recorder.types == ["created"]

    def test_update_delete_rename(self, event_bus, recorder):
        """Test updated, renamed and deleted events."""
        tree = FileTree(events=event_bus)
        tree.create_file("/a.txt", "1")
        tree.write_file("/a.txt", "2")
        tree.rename("/a.txt", "/b.txt")
        tree.delete("/b.txt")

        assert recorder.types == ["created", "updated", "renamed", "deleted"]
        renamed = recorder.events[2]
        assert renamed.path == "/b.txt"
        assert renamed.data == {"old_path": "/a.txt"}

    def test_failed_operation_emits_nothing(self, event_bus, recorder):
        """Test no event is emitted when a mutation fails."""
        tree = FileTree(events=event_bus)

        with pytest.raises(NotFoundError):
            tree.delete("/missing")

        assert recorder.events == []

    def test_listener_sees_completed_state(self, event_bus):
        """Test listeners observe the tree after the mutation is applied."""
        tree = FileTree(events=event_bus)
        seen = []

        class ReadingListener:
            def handle_event(self, event):
                seen.append(tree.read_file(event.path))

        event_bus.subscribe(ReadingListener())
        tree.create_file("/App.jsx", "content")

        assert seen == ["content"]
