"""Snapshot encoding and decoding for file trees.

A Snapshot is the JSON-serializable form of a whole FileTree: one record per
entry with its path, type and content (``None`` for directories). Snapshots
travel with every request and are what the project store persists.

Encoding is deterministic: records follow a pre-order traversal with children
sorted by name, so two trees with the same entries always encode identically.

Decoding replays the records in order into a fresh tree and aborts with
MalformedSnapshotError on the first violation. Two input shapes are accepted:

- the list form produced by :meth:`TreeCodec.encode`
  (``{"version": 1, "entries": [{"path": ..., "type": ..., "content": ...}]}``
  or just the list of records)
- the path-keyed mapping form
  (``{"/App.jsx": {"type": "file", "content": "..."}, "/src": {"type": "directory"}}``)

Missing intermediate directories are created unless the codec is strict, in
which case every parent must have its own directory record.

Example:
    >>> tree = FileTree()
    >>> tree.create_file("/src/App.jsx", "export default function App() {}")
    >>> snapshot = TreeCodec().encode(tree)
    >>> [record.path for record in snapshot.entries]
    ['/src', '/src/App.jsx']
    >>> TreeCodec().decode(snapshot).read_file("/src/App.jsx")
    'export default function App() {}'
"""

import json
import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from uigen.config.constants import SNAPSHOT_FORMAT_VERSION
from uigen.events import TreeEventBus
from uigen.exceptions import InvalidPathError, MalformedSnapshotError, PathConflictError
from uigen.filesystem import paths
from uigen.filesystem.tree import EntryKind, FileTree

logger = logging.getLogger(__name__)


class SnapshotRecord(BaseModel):
    """One entry of a snapshot."""

    model_config = ConfigDict(extra="ignore")

    path: str
    type: EntryKind = Field(validation_alias=AliasChoices("type", "kind"))
    content: str | None = None


class Snapshot(BaseModel):
    """Serialized form of an entire FileTree."""

    version: int = SNAPSHOT_FORMAT_VERSION
    entries: list[SnapshotRecord] = Field(default_factory=list)

    def to_json_value(self) -> dict[str, Any]:
        """Return the plain JSON value exchanged over the transport boundary."""
        return self.model_dump(mode="json")


class TreeCodec:
    """Encodes FileTrees to Snapshots and decodes them back.

    Args:
        strict: Reject snapshots whose files or directories have a parent
            directory without its own record, instead of creating it
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, tree: FileTree) -> Snapshot:
        """Encode a tree into a Snapshot."""
        records = [
            SnapshotRecord(
                path=entry.path,
                type=entry.kind,
                content=(entry.content or "") if entry.is_file else None,
            )
            for entry in tree.walk()
        ]
        return Snapshot(entries=records)

    def encode_json(self, tree: FileTree, indent: int | None = None) -> str:
        """Encode a tree into a JSON string."""
        return json.dumps(self.encode(tree).to_json_value(), indent=indent)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, snapshot: Any, events: TreeEventBus | None = None) -> FileTree:
        """Reconstruct a tree from a snapshot.

        Args:
            snapshot: Snapshot model, list-form dict, list of records, or
                path-keyed mapping
            events: Event bus attached to the decoded tree once it is complete

        Returns:
            A fresh FileTree

        Raises:
            MalformedSnapshotError: If any record violates the tree invariants
        """
        records = self._validate_records(self._raw_records(snapshot))
        normalized = self._normalize_paths(records)

        if self.strict:
            self._check_declared_parents(records, normalized)

        tree = FileTree()
        declared: set[str] = set()
        for index, (record, path) in enumerate(zip(records, normalized)):
            if path == paths.ROOT:
                if record.type is not EntryKind.DIRECTORY:
                    raise MalformedSnapshotError(
                        "Root path must be a directory", path=path, index=index
                    )
                if record.content:
                    raise MalformedSnapshotError(
                        f"Directory record carries content: {path}", path=path, index=index
                    )
                continue

            if path in declared:
                raise MalformedSnapshotError(
                    f"Duplicate record for {path}", path=path, index=index
                )
            declared.add(path)

            missing = [ancestor for ancestor in paths.ancestors(path) if ancestor not in tree]
            try:
                if record.type is EntryKind.FILE:
                    tree.create_file(path, record.content or "")
                else:
                    if record.content:
                        raise MalformedSnapshotError(
                            f"Directory record carries content: {path}", path=path, index=index
                        )
                    tree.create_directory(path)
            except PathConflictError as e:
                raise MalformedSnapshotError(
                    f"File and directory collide at {path}: {e}", path=path, index=index
                ) from e

            if missing:
                logger.debug(f"Created missing directories for {path}: {missing}")

        tree.events = events
        return tree

    def decode_json(self, text: str | bytes, events: TreeEventBus | None = None) -> FileTree:
        """Reconstruct a tree from a JSON string.

        Raises:
            MalformedSnapshotError: If the text is not JSON or the snapshot is malformed
        """
        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedSnapshotError(f"Snapshot is not valid JSON: {e}") from e
        return self.decode(value, events=events)

    def _raw_records(self, snapshot: Any) -> list[Any]:
        """Extract the raw record list from any accepted snapshot shape."""
        if isinstance(snapshot, Snapshot):
            return [record.model_dump() for record in snapshot.entries]

        if isinstance(snapshot, list):
            return snapshot

        if isinstance(snapshot, dict):
            if "entries" in snapshot:
                version = snapshot.get("version", SNAPSHOT_FORMAT_VERSION)
                if version != SNAPSHOT_FORMAT_VERSION:
                    raise MalformedSnapshotError(f"Unsupported snapshot version: {version!r}")
                entries = snapshot["entries"]
                if not isinstance(entries, list):
                    raise MalformedSnapshotError("Snapshot 'entries' must be a list")
                return entries

            # Path-keyed mapping form
            records = []
            for key, node in snapshot.items():
                if not isinstance(node, dict):
                    raise MalformedSnapshotError(
                        f"Snapshot node for {key!r} must be an object", path=str(key)
                    )
                records.append({**node, "path": key})
            return records

        raise MalformedSnapshotError(
            f"Snapshot must be a list or an object, got {type(snapshot).__name__}"
        )

    def _validate_records(self, raw_records: list[Any]) -> list[SnapshotRecord]:
        records = []
        for index, raw in enumerate(raw_records):
            try:
                records.append(SnapshotRecord.model_validate(raw))
            except ValidationError as e:
                raise MalformedSnapshotError(
                    f"Invalid snapshot record at index {index}: {e}", index=index
                ) from e
        return records

    def _normalize_paths(self, records: list[SnapshotRecord]) -> list[str]:
        normalized = []
        for index, record in enumerate(records):
            try:
                normalized.append(paths.normalize(record.path))
            except InvalidPathError as e:
                raise MalformedSnapshotError(
                    f"Invalid path in snapshot record at index {index}: {e}",
                    path=record.path,
                    index=index,
                ) from e
        return normalized

    def _check_declared_parents(
        self, records: list[SnapshotRecord], normalized: list[str]
    ) -> None:
        directories = {paths.ROOT} | {
            path
            for record, path in zip(records, normalized)
            if record.type is EntryKind.DIRECTORY
        }
        for index, path in enumerate(normalized):
            parent = paths.parent(path)
            if parent is not None and parent not in directories:
                raise MalformedSnapshotError(
                    f"Parent directory of {path} has no record: {parent}", path=path, index=index
                )


def encode(tree: FileTree) -> Snapshot:
    """Encode a tree with the default codec."""
    return TreeCodec().encode(tree)


def decode(snapshot: Any, strict: bool = False) -> FileTree:
    """Decode a snapshot with a codec of the given strictness."""
    return TreeCodec(strict=strict).decode(snapshot)
