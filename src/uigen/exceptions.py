"""Custom exceptions for workspace errors.

This module defines the error taxonomy shared by the file tree, the tool
executor and the snapshot codec.

Exception Hierarchy:
    WorkspaceError (base)
    ├── InvalidPathError
    ├── NotFoundError
    ├── PathConflictError
    ├── InvalidOperationError
    ├── AmbiguousMatchError
    └── MalformedSnapshotError

Each class carries a machine-readable ``code`` which is what a failed
CommandResult reports back to the command source.
"""


class WorkspaceError(Exception):
    """Base exception for all workspace errors.

    Attributes:
        code: Machine-readable error code
        path: Normalized or raw path the error refers to (optional)
    """

    code = "workspace_error"

    def __init__(self, message: str, path: str | None = None):
        """Initialize WorkspaceError.

        Args:
            message: Human-friendly error message
            path: Path the error refers to
        """
        self.path = path
        super().__init__(message)


class InvalidPathError(WorkspaceError):
    """Supplied path fails normalization.

    Raised for empty paths, traversal segments, trailing separators and
    disallowed characters.

    Example:
        >>> raise InvalidPathError("Path contains '..' segment: /a/../b", path="/a/../b")
    """

    code = "invalid_path"


class NotFoundError(WorkspaceError):
    """Target path, or a content match, does not exist."""

    code = "not_found"


class PathConflictError(WorkspaceError):
    """Operation would collide with an existing incompatible entry.

    Example:
        >>> raise PathConflictError("A directory already exists at /src", path="/src")
    """

    code = "path_conflict"


class InvalidOperationError(WorkspaceError):
    """Operation is structurally disallowed (deleting root, moving into own subtree)."""

    code = "invalid_operation"


class AmbiguousMatchError(WorkspaceError):
    """A replacement target occurs more than once.

    Attributes:
        occurrences: Number of times the target string was found
    """

    code = "ambiguous_match"

    def __init__(self, message: str, path: str | None = None, occurrences: int = 0):
        self.occurrences = occurrences
        super().__init__(message, path=path)


class MalformedSnapshotError(WorkspaceError):
    """Snapshot input violates the tree invariants.

    Decoding aborts as a whole when this is raised; callers fall back to an
    empty tree or the last known good snapshot.

    Attributes:
        index: Position of the offending record in the snapshot (optional)
    """

    code = "malformed_snapshot"

    def __init__(self, message: str, path: str | None = None, index: int | None = None):
        self.index = index
        super().__init__(message, path=path)
