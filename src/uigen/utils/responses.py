"""Shared response helpers for tool commands.

Every command applied to a workspace produces a CommandResult. Results keep a
single shape so the command source can handle them uniformly:

    {"success": True, "result": ..., "error": None, "message": "..."}
    {"success": False, "result": None, "error": "not_found", "message": "..."}
"""

from typing import Any

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Outcome of applying one command."""

    success: bool = Field(description="Whether the command was applied")
    result: Any = Field(default=None, description="Success payload")
    error: str | None = Field(default=None, description="Machine-readable error code")
    message: str = Field(default="", description="Human-friendly message")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serializable response dictionary."""
        return self.model_dump()


def create_success_response(result: Any, message: str = "") -> CommandResult:
    """Create standardized success response.

    Args:
        result: Command result (file content, listing or tree summary)
        message: Optional success message for logging/display

    Returns:
        CommandResult with success=True

    Example:
        >>> response = create_success_response(result="hello", message="Viewed /a.txt")
        >>> response.to_dict()
        {'success': True, 'result': 'hello', 'error': None, 'message': 'Viewed /a.txt'}
    """
    return CommandResult(success=True, result=result, message=message)


def create_error_response(error: str, message: str) -> CommandResult:
    """Create standardized error response.

    Tools use this rather than raising so one bad command never halts the
    stream it arrived in.

    Args:
        error: Machine-readable error code (e.g., "not_found")
        message: Human-friendly error message

    Returns:
        CommandResult with success=False

    Example:
        >>> response = create_error_response("not_found", "File not found: /a.txt")
        >>> response.success
        False
    """
    return CommandResult(success=False, error=error, message=message)
