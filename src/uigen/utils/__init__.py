"""Utility modules for uigen."""

from uigen.utils.responses import CommandResult, create_error_response, create_success_response

__all__ = [
    "CommandResult",
    "create_success_response",
    "create_error_response",
]
