"""Tool command families applied to a workspace."""

from uigen.tools.commands import (
    EDITOR_TOOL,
    MANAGER_TOOL,
    Command,
    EditorCommand,
    ManagerCommand,
    parse_command,
)
from uigen.tools.executor import ToolExecutor
from uigen.tools.toolset import WorkspaceToolset

__all__ = [
    "EDITOR_TOOL",
    "MANAGER_TOOL",
    "Command",
    "EditorCommand",
    "ManagerCommand",
    "parse_command",
    "ToolExecutor",
    "WorkspaceToolset",
]
