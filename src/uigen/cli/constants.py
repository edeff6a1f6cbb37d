"""Constants for CLI module."""


class ExitCodes:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    COMMAND_FAILED = 2
    INTERRUPTED = 130


# Snapshot argument meaning "start from an empty tree"
EMPTY_SNAPSHOT = "-"
