"""Project persistence for workspaces.

This module saves and loads project snapshots together with opaque metadata
(for example the conversation transcript that produced them), keyed by a
project identifier. Each project is one JSON file; an index file lists every
stored project.

Persistence is a point-in-time snapshot taken between commands: callers encode
the tree after a batch of commands has been applied, never while one is in
flight.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any

from uigen.codec import TreeCodec
from uigen.events import TreeEventBus
from uigen.exceptions import MalformedSnapshotError
from uigen.filesystem import FileTree

logger = logging.getLogger(__name__)


def _sanitize_project_id(project_id: str) -> str:
    """Sanitize a project identifier to prevent path traversal attacks.

    Args:
        project_id: Caller-provided project identifier

    Returns:
        Sanitized identifier safe for filesystem use

    Raises:
        ValueError: If the identifier is invalid or unsafe

    Example:
        >>> _sanitize_project_id("landing-page")
        'landing-page'
        >>> _sanitize_project_id("../etc/passwd")
        ValueError: Project id can only contain letters, numbers, underscores, dashes, and dots
    """
    project_id = project_id.strip()

    if not project_id or len(project_id) > 64:
        raise ValueError("Project id must be between 1 and 64 characters")

    if not re.match(r"^[A-Za-z0-9._-]+$", project_id):
        raise ValueError(
            "Project id can only contain letters, numbers, underscores, dashes, and dots"
        )

    if ".." in project_id or project_id.startswith("."):
        raise ValueError("Invalid project id: path traversal not allowed")

    reserved_names = {"index", "con", "prn", "aux", "nul"}
    if project_id.lower() in reserved_names:
        raise ValueError(f"Reserved name '{project_id}' cannot be used")

    return project_id


class ProjectStore:
    """Manage project snapshot storage.

    Example:
        >>> store = ProjectStore(Path("~/.uigen/projects").expanduser())
        >>> store.save_project("landing-page", tree, metadata={"messages": []})
        >>> tree, metadata = store.load_project("landing-page")
    """

    def __init__(self, storage_dir: Path, codec: TreeCodec | None = None):
        """Initialize the project store.

        Args:
            storage_dir: Directory for storing project files
            codec: Codec used for snapshots (lenient codec when omitted)
        """
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.codec = codec or TreeCodec()

        self.index_file = self.storage_dir / "index.json"
        self._load_index()

        logger.debug(f"Project store initialized: {self.storage_dir}")

    def _load_index(self) -> None:
        """Load the project index."""
        if self.index_file.exists():
            try:
                with open(self.index_file) as f:
                    self.index = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load project index, starting fresh: {e}")
                self.index = {"projects": {}}
        else:
            self.index = {"projects": {}}
            self._save_index()

    def _save_index(self) -> None:
        """Save the project index."""
        try:
            with open(self.index_file, "w") as f:
                json.dump(self.index, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save project index: {e}")
            raise

    def _project_file(self, project_id: str) -> Path:
        return self.storage_dir / f"{project_id}.json"

    def save_project(
        self,
        project_id: str,
        tree: FileTree,
        metadata: dict[str, Any] | None = None,
    ) -> Path:
        """Save a project snapshot and its metadata.

        Args:
            project_id: Identifier for this project
            tree: Tree to snapshot
            metadata: Opaque JSON-serializable metadata stored alongside

        Returns:
            Path to the saved project file

        Raises:
            ValueError: If the project id is invalid or unsafe
        """
        safe_id = _sanitize_project_id(project_id)
        logger.info(f"Saving project '{safe_id}'...")

        now = datetime.now().isoformat()
        previous = self.index["projects"].get(safe_id, {})
        summary = tree.summary()

        project_data = {
            "project_id": safe_id,
            "created_at": previous.get("created_at", now),
            "updated_at": now,
            "file_count": summary["files"],
            "snapshot": self.codec.encode(tree).to_json_value(),
            "metadata": metadata or {},
        }

        file_path = self._project_file(safe_id)
        with open(file_path, "w") as f:
            json.dump(project_data, f, indent=2)

        self.index["projects"][safe_id] = {
            "project_id": safe_id,
            "created_at": project_data["created_at"],
            "updated_at": project_data["updated_at"],
            "file_count": summary["files"],
        }
        self._save_index()

        logger.info(f"Saved project to {file_path}")
        return file_path

    def load_project(
        self, project_id: str, events: TreeEventBus | None = None
    ) -> tuple[FileTree, dict[str, Any]]:
        """Load a project snapshot and its metadata.

        Args:
            project_id: Identifier of the project
            events: Event bus attached to the decoded tree

        Returns:
            Tuple of (tree, metadata)

        Raises:
            FileNotFoundError: If the project doesn't exist
            MalformedSnapshotError: If the stored snapshot cannot be decoded
        """
        safe_id = _sanitize_project_id(project_id)
        file_path = self._project_file(safe_id)

        if not file_path.exists():
            raise FileNotFoundError(f"Project '{safe_id}' not found")

        logger.info(f"Loading project '{safe_id}'...")

        try:
            with open(file_path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedSnapshotError(f"Project file for '{safe_id}' is not valid JSON: {e}") from e

        if not isinstance(data, dict) or "snapshot" not in data:
            raise MalformedSnapshotError(f"Project file for '{safe_id}' has no snapshot")

        tree = self.codec.decode(data["snapshot"], events=events)
        return tree, data.get("metadata") or {}

    def load_project_or_empty(
        self, project_id: str, events: TreeEventBus | None = None
    ) -> tuple[FileTree, dict[str, Any]]:
        """Load a project, falling back to an empty tree.

        Used at request start: a missing project or a snapshot that fails to
        decode yields a fresh empty tree and empty metadata.
        """
        try:
            return self.load_project(project_id, events=events)
        except FileNotFoundError:
            logger.debug(f"Project '{project_id}' not found, starting with an empty tree")
        except MalformedSnapshotError as e:
            logger.warning(f"Discarding malformed snapshot for project '{project_id}': {e}")
        return FileTree(events=events), {}

    def list_projects(self) -> list[dict[str, Any]]:
        """List stored projects, most recently updated first.

        Returns:
            List of project index entries
        """
        projects = list(self.index["projects"].values())
        projects.sort(key=lambda p: p.get("updated_at", ""), reverse=True)
        return projects

    def delete_project(self, project_id: str) -> None:
        """Delete a stored project.

        Raises:
            FileNotFoundError: If the project doesn't exist
        """
        safe_id = _sanitize_project_id(project_id)
        file_path = self._project_file(safe_id)

        if not file_path.exists():
            raise FileNotFoundError(f"Project '{safe_id}' not found")

        file_path.unlink()
        self.index["projects"].pop(safe_id, None)
        self._save_index()

        logger.info(f"Deleted project '{safe_id}'")
