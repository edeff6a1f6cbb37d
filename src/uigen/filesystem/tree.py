"""In-memory hierarchical file store.

The FileTree owns exactly one root directory (``/``) and every entry beneath
it. Entries are reachable both through their parent's ``children`` mapping and
through a flat path index, so lookups never walk the tree.

Every mutating operation validates completely before it touches any entry:
either the whole operation succeeds and the tree reflects it, or it raises a
WorkspaceError and the tree is left exactly as it was. Change events are
emitted only after a mutation has completed.

Example:
    >>> tree = FileTree()
    >>> tree.create_file("/src/App.jsx", "export default function App() {}")
    Entry(path='/src/App.jsx', kind=<EntryKind.FILE: 'file'>, ...)
    >>> tree.list("/")
    ['src']
    >>> tree.read_file("/src/App.jsx")
    'export default function App() {}'
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from uigen.events import TreeEvent, TreeEventBus, TreeEventType
from uigen.exceptions import (
    InvalidOperationError,
    InvalidPathError,
    NotFoundError,
    PathConflictError,
)
from uigen.filesystem import paths

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Kind of a tree entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class Entry:
    """A single node in the tree.

    A file has content and no children; a directory has children and no
    content. ``children`` maps child name to entry.
    """

    path: str
    kind: EntryKind
    content: str | None = None
    children: dict[str, "Entry"] = field(default_factory=dict, repr=False)

    @property
    def name(self) -> str:
        return paths.basename(self.path)

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


class FileTree:
    """Virtual file tree for one project workspace.

    All public operations accept raw path strings and normalize them
    internally; all returned paths are normalized.

    Args:
        events: Optional event bus notified after each successful mutation
    """

    def __init__(self, events: TreeEventBus | None = None):
        self.events = events
        self._root = Entry(paths.ROOT, EntryKind.DIRECTORY)
        self._index: dict[str, Entry] = {paths.ROOT: self._root}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def root(self) -> Entry:
        return self._root

    def exists(self, path: str) -> bool:
        """Check whether an entry exists at ``path``.

        Raises:
            InvalidPathError: If ``path`` cannot be normalized
        """
        return paths.normalize(path) in self._index

    def stat(self, path: str) -> EntryKind:
        """Return the kind of the entry at ``path``.

        Raises:
            NotFoundError: If nothing exists at ``path``
        """
        return self.get_entry(path).kind

    def get_entry(self, path: str) -> Entry:
        """Return the entry at ``path``.

        Raises:
            InvalidPathError: If ``path`` cannot be normalized
            NotFoundError: If nothing exists at ``path``
        """
        normalized = paths.normalize(path)
        entry = self._index.get(normalized)
        if entry is None:
            raise NotFoundError(f"No such file or directory: {normalized}", path=normalized)
        return entry

    def read_file(self, path: str) -> str:
        """Return the content of the file at ``path``.

        Raises:
            NotFoundError: If ``path`` is absent or names a directory
        """
        normalized = paths.normalize(path)
        entry = self._index.get(normalized)
        if entry is None:
            raise NotFoundError(f"File not found: {normalized}", path=normalized)
        if entry.is_directory:
            raise NotFoundError(f"Path is a directory, not a file: {normalized}", path=normalized)
        return entry.content or ""

    def walk(self, path: str = paths.ROOT) -> Iterator[Entry]:
        """Yield every entry below ``path`` in pre-order, children sorted by name.

        The starting directory itself is not yielded.
        """
        start = self.get_entry(path)
        stack = [start.children[name] for name in sorted(start.children, reverse=True)]
        while stack:
            entry = stack.pop()
            yield entry
            if entry.is_directory:
                stack.extend(entry.children[name] for name in sorted(entry.children, reverse=True))

    def files(self) -> dict[str, str]:
        """Return a mapping of every file path to its content."""
        return {entry.path: entry.content or "" for entry in self.walk() if entry.is_file}

    def summary(self) -> dict[str, Any]:
        """Summarize the tree for command results.

        Returns:
            Dictionary with file and directory counts and the sorted file paths
        """
        file_paths = [entry.path for entry in self.walk() if entry.is_file]
        return {
            "files": len(file_paths),
            "directories": len(self._index) - 1 - len(file_paths),
            "paths": file_paths,
        }

    def __len__(self) -> int:
        return len(self._index) - 1

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        try:
            return self.exists(path)
        except InvalidPathError:
            return False

    def __repr__(self) -> str:
        return f"FileTree(entries={len(self)})"

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_file(self, path: str, content: str = "") -> Entry:
        """Create a file, creating missing parent directories (like ``mkdir -p``).

        Creating a file that already exists overwrites its content, so
        re-delivering the same create is a no-op success.

        Raises:
            PathConflictError: If a directory occupies ``path`` or a path
                component is an existing file
        """
        normalized = paths.normalize(path)
        existing = self._index.get(normalized)
        if existing is not None:
            if existing.is_directory:
                raise PathConflictError(
                    f"A directory already exists at {normalized}", path=normalized
                )
            if existing.content != content:
                existing.content = content
                self._emit(TreeEventType.UPDATED, existing)
            return existing

        missing = self._plan_parents(normalized)
        created = [self._attach(Entry(directory, EntryKind.DIRECTORY)) for directory in missing]
        entry = self._attach(Entry(normalized, EntryKind.FILE, content=content))

        for directory in created:
            self._emit(TreeEventType.CREATED, directory)
        self._emit(TreeEventType.CREATED, entry)
        return entry

    def create_directory(self, path: str) -> Entry:
        """Create a directory, creating missing parents. Existing directories are returned as-is.

        Raises:
            PathConflictError: If a file occupies ``path`` or any path component
        """
        normalized = paths.normalize(path)
        existing = self._index.get(normalized)
        if existing is not None:
            if existing.is_file:
                raise PathConflictError(f"A file already exists at {normalized}", path=normalized)
            return existing

        missing = self._plan_parents(normalized)
        created = [self._attach(Entry(directory, EntryKind.DIRECTORY)) for directory in missing]
        entry = self._attach(Entry(normalized, EntryKind.DIRECTORY))

        for directory in [*created, entry]:
            self._emit(TreeEventType.CREATED, directory)
        return entry

    def write_file(self, path: str, content: str) -> Entry:
        """Write content to a file whose parent directory already exists.

        Unlike :meth:`create_file` this never creates parent directories.

        Raises:
            NotFoundError: If the parent directory chain does not exist
            PathConflictError: If ``path`` names a directory or a path
                component is a file
        """
        normalized = paths.normalize(path)
        existing = self._index.get(normalized)
        if existing is not None:
            if existing.is_directory:
                raise PathConflictError(
                    f"Cannot write to a directory: {normalized}", path=normalized
                )
            if existing.content != content:
                existing.content = content
                self._emit(TreeEventType.UPDATED, existing)
            return existing

        parent_path = paths.parent(normalized)
        parent = self._index.get(parent_path) if parent_path is not None else None
        if parent is None:
            raise NotFoundError(
                f"Parent directory does not exist: {parent_path}", path=normalized
            )
        if parent.is_file:
            raise PathConflictError(
                f"Parent path is a file, not a directory: {parent_path}", path=normalized
            )

        entry = self._attach(Entry(normalized, EntryKind.FILE, content=content))
        self._emit(TreeEventType.CREATED, entry)
        return entry

    def delete(self, path: str) -> Entry:
        """Delete a file, or a directory together with its entire subtree.

        Returns:
            The detached entry

        Raises:
            InvalidOperationError: If ``path`` is the root
            NotFoundError: If nothing exists at ``path``
        """
        normalized = paths.normalize(path)
        if normalized == paths.ROOT:
            raise InvalidOperationError("Cannot delete the root directory", path=normalized)

        entry = self._index.get(normalized)
        if entry is None:
            raise NotFoundError(f"No such file or directory: {normalized}", path=normalized)

        removed = [entry, *self._subtree(entry)]
        parent = self._index[paths.parent(normalized)]
        del parent.children[entry.name]
        for node in removed:
            del self._index[node.path]

        logger.debug(f"Deleted {normalized} ({len(removed)} entries)")
        self._emit(TreeEventType.DELETED, entry)
        return entry

    def rename(self, source: str, destination: str) -> Entry:
        """Move an entry, and its subtree if it is a directory, to a new path.

        Missing parent directories of the destination are created.

        Raises:
            InvalidOperationError: If ``source`` is the root or ``destination``
                lies inside ``source``
            NotFoundError: If ``source`` does not exist
            PathConflictError: If ``destination`` already exists or one of its
                parent components is a file
        """
        old_path = paths.normalize(source)
        new_path = paths.normalize(destination)

        if old_path == paths.ROOT:
            raise InvalidOperationError("Cannot rename the root directory", path=old_path)

        entry = self._index.get(old_path)
        if entry is None:
            raise NotFoundError(f"No such file or directory: {old_path}", path=old_path)

        if paths.is_descendant(new_path, old_path):
            raise InvalidOperationError(
                f"Cannot move {old_path} into its own subtree: {new_path}", path=new_path
            )
        if new_path in self._index:
            raise PathConflictError(f"Destination already exists: {new_path}", path=new_path)

        missing = self._plan_parents(new_path)

        moved = [entry, *self._subtree(entry)]
        old_parent = self._index[paths.parent(old_path)]
        del old_parent.children[entry.name]
        created = [self._attach(Entry(directory, EntryKind.DIRECTORY)) for directory in missing]

        for node in moved:
            del self._index[node.path]
        for node in moved:
            node.path = paths.rebase(node.path, old_path, new_path)
            self._index[node.path] = node

        # Children mappings are keyed by name, so only the moved entry is re-keyed
        self._index[paths.parent(new_path)].children[entry.name] = entry

        logger.debug(f"Renamed {old_path} -> {new_path} ({len(moved)} entries)")
        for directory in created:
            self._emit(TreeEventType.CREATED, directory)
        self._emit(TreeEventType.RENAMED, entry, old_path=old_path)
        return entry

    def clear(self) -> None:
        """Remove every entry except the root."""
        top_level = [self._root.children[name] for name in sorted(self._root.children)]
        self._root.children.clear()
        self._index = {paths.ROOT: self._root}
        for entry in top_level:
            self._emit(TreeEventType.DELETED, entry)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _plan_parents(self, normalized: str) -> list[str]:
        """Return the missing ancestor directories of ``normalized``, root side first.

        Raises:
            PathConflictError: If an existing ancestor is a file
        """
        missing = []
        for ancestor in paths.ancestors(normalized):
            existing = self._index.get(ancestor)
            if existing is None:
                missing.append(ancestor)
            elif existing.is_file:
                raise PathConflictError(
                    f"Path component is a file, not a directory: {ancestor}", path=normalized
                )
        return missing

    def _attach(self, entry: Entry) -> Entry:
        parent = self._index[paths.parent(entry.path)]
        parent.children[entry.name] = entry
        self._index[entry.path] = entry
        return entry

    def _subtree(self, entry: Entry) -> list[Entry]:
        result = []
        stack = list(entry.children.values())
        while stack:
            node = stack.pop()
            result.append(node)
            stack.extend(node.children.values())
        return result

    def _emit(self, event_type: TreeEventType, entry: Entry, **data: Any) -> None:
        if self.events is None:
            return
        self.events.emit(
            TreeEvent(type=event_type, path=entry.path, kind=entry.kind.value, data=data)
        )

    # Defined last: inside the class body this name shadows the builtin
    def list(self, path: str = paths.ROOT) -> list[str]:
        """List the names of the direct children of a directory, sorted by name.

        Raises:
            NotFoundError: If ``path`` does not exist or is not a directory
        """
        normalized = paths.normalize(path)
        entry = self._index.get(normalized)
        if entry is None:
            raise NotFoundError(f"Directory not found: {normalized}", path=normalized)
        if not entry.is_directory:
            raise NotFoundError(f"Path is not a directory: {normalized}", path=normalized)
        return sorted(entry.children)
