"""Rich renderables for file trees, command results and settings."""

from typing import Any

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from uigen.config import WorkspaceSettings
from uigen.filesystem import Entry, FileTree, paths
from uigen.utils.responses import CommandResult

# Visual symbols
SYMBOL_SUCCESS = "✓"
SYMBOL_ERROR = "✗"

# Colors
COLOR_DIRECTORY = "bold blue"
COLOR_FILE = "white"
COLOR_SUCCESS = "green"
COLOR_ERROR = "red"


def _file_label(entry: Entry) -> Text:
    content = entry.content or ""
    line_count = content.count("\n") + 1 if content else 0
    label = Text(entry.name, style=COLOR_FILE)
    label.append(f"  ({line_count} lines, {len(content.encode('utf-8'))} bytes)", style="dim")
    return label


def build_file_tree(tree: FileTree, title: str = paths.ROOT) -> Tree:
    """Build a Rich tree mirroring the workspace, children sorted by name."""
    root = Tree(Text(title, style=COLOR_DIRECTORY))

    def add_children(node: Tree, entry: Entry) -> None:
        for name in tree.list(entry.path):
            child = entry.children[name]
            if child.is_directory:
                branch = node.add(Text(f"{name}/", style=COLOR_DIRECTORY))
                add_children(branch, child)
            else:
                node.add(_file_label(child))

    add_children(root, tree.root)
    return root


def build_results_table(results: list[tuple[int, CommandResult]]) -> Table:
    """Build a table with one row per applied command."""
    table = Table(title="Command Results", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Status")
    table.add_column("Error", style="yellow")
    table.add_column("Message")

    for number, result in results:
        if result.success:
            status = Text(SYMBOL_SUCCESS, style=COLOR_SUCCESS)
        else:
            status = Text(SYMBOL_ERROR, style=COLOR_ERROR)
        table.add_row(str(number), status, result.error or "", result.message)

    return table


def build_projects_table(projects: list[dict[str, Any]]) -> Table:
    """Build a table listing stored projects."""
    table = Table(title="Projects", show_header=True, header_style="bold cyan")
    table.add_column("Project", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Updated", style="dim")

    for project in projects:
        table.add_row(
            project.get("project_id", "?"),
            str(project.get("file_count", 0)),
            project.get("updated_at", ""),
        )

    return table


def build_settings_table(settings: WorkspaceSettings) -> Table:
    """Build a table of the effective settings."""
    table = Table(title="UIGen Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Data Directory", str(settings.data_dir))
    table.add_row("Projects Directory", str(settings.projects_dir))
    table.add_row("Max File Size", f"{settings.max_file_bytes} bytes")
    table.add_row("Strict Snapshots", "Enabled" if settings.strict_snapshots else "Disabled")
    table.add_row("Log Level", settings.log_level.upper())

    return table
