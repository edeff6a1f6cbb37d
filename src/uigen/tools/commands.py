"""Structured edit commands issued against a workspace.

Commands arrive from a language model through the transport layer, so every
field is untrusted. They are validated here, at the ingress boundary, into one
of two tagged command families:

- ``str_replace_editor`` (EditorCommand): view, create, str_replace, insert,
  undo_edit. Always scoped to a single file (``view`` also accepts a
  directory).
- ``file_manager`` (ManagerCommand): list, rename, delete. Scoped to a file or
  a directory.

Raw records may be flat (``{"tool": "file_manager", "command": "delete",
"path": "/a"}``) or tool-call shaped (``{"name": "file_manager", "args":
{...}}``).
"""

import json
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

EDITOR_TOOL = "str_replace_editor"
MANAGER_TOOL = "file_manager"

EditorCommandName = Literal["view", "create", "str_replace", "insert", "undo_edit"]
ManagerCommandName = Literal["list", "rename", "delete"]

# Keys used by tool-call records for the arguments object
_ARGUMENT_KEYS = ("args", "arguments", "input")


def _require_utf8(value: str | None) -> str | None:
    """Reject text that cannot be stored as UTF-8, such as lone surrogates."""
    if value is not None:
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValueError(f"text is not valid UTF-8 at position {e.start}") from e
    return value


class EditorCommand(BaseModel):
    """Command of the editor family."""

    model_config = ConfigDict(extra="ignore")

    tool: Literal["str_replace_editor"] = EDITOR_TOOL
    command: EditorCommandName
    path: str
    file_text: str | None = Field(
        default=None,
        validation_alias=AliasChoices("file_text", "content"),
        description="Full file content for create",
    )
    old_str: str | None = Field(default=None, description="Exact text to replace")
    new_str: str | None = Field(default=None, description="Replacement or inserted text")
    insert_line: int | None = Field(
        default=None, description="Line after which new_str is inserted (0 for the top)"
    )
    view_range: list[int] | None = Field(
        default=None, description="1-based inclusive [start, end] line range; end=-1 reads to EOF"
    )

    @field_validator("path", "file_text", "old_str", "new_str")
    @classmethod
    def check_encodable(cls, v: str | None) -> str | None:
        return _require_utf8(v)

    @model_validator(mode="after")
    def check_required_fields(self) -> "EditorCommand":
        """Check the fields each command needs are present."""
        if self.command == "str_replace" and self.old_str is None:
            raise ValueError("str_replace requires old_str")
        if self.command == "insert":
            if self.insert_line is None:
                raise ValueError("insert requires insert_line")
            if self.new_str is None:
                raise ValueError("insert requires new_str")
        if self.view_range is not None and len(self.view_range) != 2:
            raise ValueError("view_range must be [start, end]")
        return self


class ManagerCommand(BaseModel):
    """Command of the manager family."""

    model_config = ConfigDict(extra="ignore")

    tool: Literal["file_manager"] = MANAGER_TOOL
    command: ManagerCommandName
    path: str | None = Field(default=None, validation_alias=AliasChoices("path", "from"))
    new_path: str | None = Field(default=None, validation_alias=AliasChoices("new_path", "to"))

    @field_validator("path", "new_path")
    @classmethod
    def check_encodable(cls, v: str | None) -> str | None:
        return _require_utf8(v)

    @model_validator(mode="after")
    def check_required_fields(self) -> "ManagerCommand":
        """Check the fields each command needs are present."""
        if self.command in ("rename", "delete") and self.path is None:
            raise ValueError(f"{self.command} requires path")
        if self.command == "rename" and self.new_path is None:
            raise ValueError("rename requires new_path")
        return self


Command = Annotated[EditorCommand | ManagerCommand, Field(discriminator="tool")]

_command_adapter: TypeAdapter[EditorCommand | ManagerCommand] = TypeAdapter(Command)


def _flatten(raw: dict[str, Any]) -> dict[str, Any]:
    """Turn a tool-call shaped record into a flat command record."""
    if "tool" in raw:
        return raw
    for key in _ARGUMENT_KEYS:
        arguments = raw.get(key)
        if "name" in raw and arguments is not None:
            if isinstance(arguments, str):
                arguments = json.loads(arguments)
            if not isinstance(arguments, dict):
                raise ValueError(f"Tool call '{key}' must be an object")
            return {"tool": raw["name"], **arguments}
    return raw


def parse_command(raw: Any) -> EditorCommand | ManagerCommand:
    """Validate an untrusted command record.

    Args:
        raw: Command model, dict, or JSON string

    Returns:
        Validated EditorCommand or ManagerCommand

    Raises:
        pydantic.ValidationError: If the record does not describe a valid command
        ValueError: If the record is not valid JSON or has a malformed arguments object

    Example:
        >>> parse_command({"tool": "file_manager", "command": "delete", "path": "/a"})
        ManagerCommand(tool='file_manager', command='delete', path='/a', new_path=None)
    """
    if isinstance(raw, (EditorCommand, ManagerCommand)):
        return raw
    if isinstance(raw, (str, bytes)):
        raw = json.loads(raw)
    if isinstance(raw, dict):
        raw = _flatten(raw)
    return _command_adapter.validate_python(raw)
