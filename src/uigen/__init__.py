"""UIGen workspace - virtual file tree driven by editor and manager tool commands."""

from importlib.metadata import PackageNotFoundError, version

# Read version from package metadata (pyproject.toml)
try:
    __version__ = version("uigen-workspace")
except PackageNotFoundError:
    # Fallback for development environments where package isn't installed
    __version__ = "0.0.0.dev"

from uigen.codec import Snapshot, SnapshotRecord, TreeCodec
from uigen.config import WorkspaceSettings, load_settings
from uigen.events import TreeEvent, TreeEventBus, TreeEventType
from uigen.exceptions import (
    AmbiguousMatchError,
    InvalidOperationError,
    InvalidPathError,
    MalformedSnapshotError,
    NotFoundError,
    PathConflictError,
    WorkspaceError,
)
from uigen.filesystem import Entry, EntryKind, FileTree
from uigen.persistence import ProjectStore
from uigen.tools import ToolExecutor, parse_command
from uigen.utils import CommandResult

__all__ = [
    "__version__",
    # Tree
    "FileTree",
    "Entry",
    "EntryKind",
    # Commands
    "ToolExecutor",
    "CommandResult",
    "parse_command",
    # Snapshots
    "TreeCodec",
    "Snapshot",
    "SnapshotRecord",
    "ProjectStore",
    # Events
    "TreeEvent",
    "TreeEventBus",
    "TreeEventType",
    # Settings
    "WorkspaceSettings",
    "load_settings",
    # Errors
    "WorkspaceError",
    "InvalidPathError",
    "NotFoundError",
    "PathConflictError",
    "InvalidOperationError",
    "AmbiguousMatchError",
    "MalformedSnapshotError",
]
