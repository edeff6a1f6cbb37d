"""Tool command execution against a workspace file tree.

The ToolExecutor is the only ingress for edits: it validates each untrusted
command record, applies it to the FileTree it was built around, and reports a
CommandResult. Workspace errors never escape it; one bad command is reported
as a failure and the next command is applied as usual.

The executor keeps no memory between commands beyond the tree's own state, so
replaying or re-delivering a stream is well defined.

Example:
    >>> executor = ToolExecutor(FileTree())
    >>> executor.apply_command(
    ...     {"tool": "str_replace_editor", "command": "create",
    ...      "path": "/App.jsx", "file_text": "export default function App(){}"}
    ... ).success
    True
    >>> executor.apply_command({"tool": "file_manager", "command": "list", "path": "/"}).result
    ['App.jsx']
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Annotated, Any

from pydantic import Field, ValidationError

from uigen.config import WorkspaceSettings
from uigen.exceptions import (
    AmbiguousMatchError,
    InvalidOperationError,
    NotFoundError,
    WorkspaceError,
)
from uigen.filesystem import FileTree, paths
from uigen.tools.commands import (
    EDITOR_TOOL,
    MANAGER_TOOL,
    EditorCommand,
    ManagerCommand,
    parse_command,
)
from uigen.tools.toolset import WorkspaceToolset
from uigen.utils.responses import CommandResult

logger = logging.getLogger(__name__)

INVALID_COMMAND = "invalid_command"


def count_occurrences(content: str, target: str, limit: int | None = None) -> int:
    """Count occurrences of ``target`` in ``content``, overlapping ones included.

    Args:
        content: Text to search
        target: Non-empty text to find
        limit: Stop counting once this many occurrences are found

    Example:
        >>> count_occurrences("a-b-a", "a")
        2
        >>> count_occurrences("aaa", "aa")
        2
    """
    count = 0
    start = content.find(target)
    while start != -1:
        count += 1
        if limit is not None and count >= limit:
            break
        start = content.find(target, start + 1)
    return count


class ToolExecutor(WorkspaceToolset):
    """Applies editor and manager commands to one FileTree.

    ### str_replace_editor
    - ``view(path, view_range?)``: file content, or a directory listing with
      one ``[DIR] name`` / ``[FILE] name`` line per child
    - ``create(path, file_text)``: create or overwrite a file, creating parents
    - ``str_replace(path, old_str, new_str)``: replace exactly one occurrence
    - ``insert(path, insert_line, new_str)``: insert text after a line
    - ``undo_edit(path)``: always fails, edits are not recorded

    ### file_manager
    - ``list(path?)``: sorted child names of a directory (default root)
    - ``rename(path, new_path)``: move a file or directory
    - ``delete(path)``: remove a file or a directory and its subtree

    Mutating commands return ``{"path": ..., "tree": <tree summary>}`` as
    their result payload.
    """

    def __init__(self, tree: FileTree, settings: WorkspaceSettings | None = None):
        """Initialize ToolExecutor around a tree.

        Args:
            tree: Workspace file tree the commands are applied to
            settings: Settings (defaults used when omitted)
        """
        super().__init__(tree, settings)
        self._handlers: dict[tuple[str, str], Callable[[Any], CommandResult]] = {
            (EDITOR_TOOL, "view"): self._view,
            (EDITOR_TOOL, "create"): self._create,
            (EDITOR_TOOL, "str_replace"): self._str_replace,
            (EDITOR_TOOL, "insert"): self._insert,
            (EDITOR_TOOL, "undo_edit"): self._undo_edit,
            (MANAGER_TOOL, "list"): self._list,
            (MANAGER_TOOL, "rename"): self._rename,
            (MANAGER_TOOL, "delete"): self._delete,
        }

    def get_tools(self) -> list:
        """Get the LLM-facing tool functions.

        Returns:
            List containing str_replace_editor and file_manager
        """
        return [self.str_replace_editor, self.file_manager]

    # ------------------------------------------------------------------
    # Ingress
    # ------------------------------------------------------------------

    def apply_command(self, raw: Any) -> CommandResult:
        """Validate and apply a single command.

        Args:
            raw: Command model, dict, or JSON string from the command source

        Returns:
            CommandResult describing success or the failure kind
        """
        try:
            command = parse_command(raw)
        except (ValidationError, ValueError) as e:
            logger.info(f"Rejected malformed command: {e}")
            return self._create_error_response(INVALID_COMMAND, f"Invalid command: {e}")

        handler = self._handlers[(command.tool, command.command)]
        try:
            result = handler(command)
        except WorkspaceError as e:
            logger.info(f"{command.tool}.{command.command} failed ({e.code}): {e}")
            return self._error_response_from(e)

        logger.debug(f"Applied {command.tool}.{command.command}: {result.message}")
        return result

    def run(self, commands: Iterable[Any]) -> Iterator[CommandResult]:
        """Apply commands one at a time, in arrival order.

        Commands are pulled from ``commands`` lazily, so a stream that stops
        early leaves the tree as the last fully applied command left it.

        Args:
            commands: Iterable of raw command records

        Yields:
            One CommandResult per command
        """
        for raw in commands:
            yield self.apply_command(raw)

    # ------------------------------------------------------------------
    # LLM-facing tools
    # ------------------------------------------------------------------

    def str_replace_editor(
        self,
        command: Annotated[
            str, Field(description="One of: view, create, str_replace, insert, undo_edit")
        ],
        path: Annotated[str, Field(description="Absolute file path, e.g. /App.jsx")],
        file_text: Annotated[str | None, Field(description="File content for create")] = None,
        old_str: Annotated[str | None, Field(description="Exact text to replace")] = None,
        new_str: Annotated[str | None, Field(description="Replacement or inserted text")] = None,
        insert_line: Annotated[
            int | None, Field(description="Insert new_str after this line (0 for the top)")
        ] = None,
        view_range: Annotated[
            list[int] | None, Field(description="Lines [start, end] to view; end=-1 reads to EOF")
        ] = None,
    ) -> dict:
        """View, create and edit files in the project."""
        record: dict[str, Any] = {"tool": EDITOR_TOOL, "command": command, "path": path}
        optional = {
            "file_text": file_text,
            "old_str": old_str,
            "new_str": new_str,
            "insert_line": insert_line,
            "view_range": view_range,
        }
        record.update({key: value for key, value in optional.items() if value is not None})
        return self.apply_command(record).to_dict()

    def file_manager(
        self,
        command: Annotated[str, Field(description="One of: list, rename, delete")],
        path: Annotated[str | None, Field(description="File or directory path")] = None,
        new_path: Annotated[str | None, Field(description="Destination path for rename")] = None,
    ) -> dict:
        """List, rename and delete files or directories in the project."""
        record: dict[str, Any] = {"tool": MANAGER_TOOL, "command": command}
        if path is not None:
            record["path"] = path
        if new_path is not None:
            record["new_path"] = new_path
        return self.apply_command(record).to_dict()

    # ------------------------------------------------------------------
    # Editor family
    # ------------------------------------------------------------------

    def _view(self, command: EditorCommand) -> CommandResult:
        entry = self.tree.get_entry(command.path)

        if entry.is_directory:
            lines = []
            for name in self.tree.list(entry.path):
                child = entry.children[name]
                lines.append(f"[DIR] {name}" if child.is_directory else f"[FILE] {name}")
            message = f"Listed {entry.path}" if lines else f"Directory is empty: {entry.path}"
            return self._create_success_response(result="\n".join(lines), message=message)

        content = entry.content or ""
        if command.view_range is None:
            return self._create_success_response(result=content, message=f"Viewed {entry.path}")

        start, end = command.view_range
        lines = content.split("\n")
        if start < 1 or start > len(lines):
            raise InvalidOperationError(
                f"view_range start {start} is outside the file (1-{len(lines)})", path=entry.path
            )
        if end == -1:
            end = len(lines)
        elif end < start:
            raise InvalidOperationError(
                f"view_range end {end} is before start {start}", path=entry.path
            )
        selected = "\n".join(lines[start - 1 : end])
        return self._create_success_response(
            result=selected, message=f"Viewed {entry.path} lines {start}-{min(end, len(lines))}"
        )

    def _create(self, command: EditorCommand) -> CommandResult:
        content = command.file_text or ""
        self._check_size(content, command.path)

        existed = command.path in self.tree
        entry = self.tree.create_file(command.path, content)
        verb = "Updated" if existed else "Created"
        return self._create_success_response(
            result=self._mutation_payload(entry.path), message=f"{verb} {entry.path}"
        )

    def _str_replace(self, command: EditorCommand) -> CommandResult:
        old_str = command.old_str or ""
        new_str = command.new_str or ""
        if not old_str:
            raise InvalidOperationError("old_str cannot be empty", path=command.path)

        content = self.tree.read_file(command.path)
        normalized = paths.normalize(command.path)

        # All checks happen before the single write below
        occurrences = count_occurrences(content, old_str, limit=2)
        if occurrences == 0:
            raise NotFoundError(
                f"old_str not found in {normalized}. No changes made.", path=normalized
            )
        if occurrences > 1:
            total = count_occurrences(content, old_str)
            raise AmbiguousMatchError(
                f"old_str found {total} times in {normalized}. "
                "Include more surrounding context so it matches exactly once.",
                path=normalized,
                occurrences=total,
            )

        new_content = content.replace(old_str, new_str, 1)
        self._check_size(new_content, normalized)
        self.tree.write_file(normalized, new_content)
        return self._create_success_response(
            result=self._mutation_payload(normalized), message=f"Replaced text in {normalized}"
        )

    def _insert(self, command: EditorCommand) -> CommandResult:
        content = self.tree.read_file(command.path)
        normalized = paths.normalize(command.path)

        lines = content.split("\n") if content else []
        insert_line = command.insert_line or 0
        if insert_line < 0 or insert_line > len(lines):
            raise InvalidOperationError(
                f"insert_line {insert_line} is outside the file (0-{len(lines)})",
                path=normalized,
            )

        lines[insert_line:insert_line] = (command.new_str or "").split("\n")
        new_content = "\n".join(lines)
        self._check_size(new_content, normalized)
        self.tree.write_file(normalized, new_content)
        return self._create_success_response(
            result=self._mutation_payload(normalized),
            message=f"Inserted text after line {insert_line} in {normalized}",
        )

    def _undo_edit(self, command: EditorCommand) -> CommandResult:
        raise InvalidOperationError(
            "undo_edit is not supported: edits are not recorded between commands",
            path=command.path,
        )

    # ------------------------------------------------------------------
    # Manager family
    # ------------------------------------------------------------------

    def _list(self, command: ManagerCommand) -> CommandResult:
        path = command.path or paths.ROOT
        names = self.tree.list(path)
        return self._create_success_response(
            result=names, message=f"{len(names)} entries in {paths.normalize(path)}"
        )

    def _rename(self, command: ManagerCommand) -> CommandResult:
        old_path = paths.normalize(command.path or "")
        entry = self.tree.rename(old_path, command.new_path or "")
        payload = self._mutation_payload(entry.path)
        payload["old_path"] = old_path
        return self._create_success_response(
            result=payload, message=f"Renamed {old_path} to {entry.path}"
        )

    def _delete(self, command: ManagerCommand) -> CommandResult:
        entry = self.tree.delete(command.path or "")
        return self._create_success_response(
            result=self._mutation_payload(entry.path), message=f"Deleted {entry.path}"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _mutation_payload(self, path: str) -> dict[str, Any]:
        return {"path": path, "tree": self.tree.summary()}

    def _check_size(self, content: str, path: str) -> None:
        size = len(content.encode("utf-8"))
        limit = self.settings.max_file_bytes
        if size > limit:
            raise InvalidOperationError(
                f"Content size ({size} bytes) exceeds max file size ({limit} bytes)", path=path
            )
