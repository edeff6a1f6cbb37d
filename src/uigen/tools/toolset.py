"""Base class for workspace toolsets.

Toolsets encapsulate related tools bound to one FileTree. The tree is passed
in explicitly, never looked up from shared state, so each session owns its
own workspace and tests can build toolsets around throwaway trees.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from uigen.config import WorkspaceSettings
from uigen.exceptions import WorkspaceError
from uigen.filesystem import FileTree
from uigen.utils.responses import CommandResult, create_error_response, create_success_response


class WorkspaceToolset(ABC):
    """Base class for workspace toolsets.

    Example:
        >>> class CountTools(WorkspaceToolset):
        ...     def get_tools(self):
        ...         return [self.count_files]
        ...
        ...     def count_files(self) -> dict:
        ...         return self._create_success_response(
        ...             result=self.tree.summary()["files"], message="Counted files"
        ...         ).to_dict()
    """

    def __init__(self, tree: FileTree, settings: WorkspaceSettings | None = None):
        """Initialize toolset with the tree it operates on.

        Args:
            tree: Workspace file tree owned by the caller's session
            settings: Settings (defaults used when omitted)
        """
        self.tree = tree
        self.settings = settings or WorkspaceSettings()

    @abstractmethod
    def get_tools(self) -> list[Callable]:
        """Get list of tool functions.

        Tools are exposed to the language model, so they take plain keyword
        arguments with type hints and return response dictionaries.

        Returns:
            List of callable tool functions
        """
        pass

    def _create_success_response(self, result: Any, message: str = "") -> CommandResult:
        """Create standardized success response."""
        return create_success_response(result, message)

    def _create_error_response(self, error: str, message: str) -> CommandResult:
        """Create standardized error response."""
        return create_error_response(error, message)

    def _error_response_from(self, error: WorkspaceError) -> CommandResult:
        """Translate a workspace exception into a failed CommandResult."""
        return create_error_response(error.code, str(error))
