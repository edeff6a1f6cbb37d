"""Utility functions for CLI module."""

import logging
import os
import platform
import sys
from collections.abc import Iterator
from pathlib import Path

from rich.console import Console

from uigen.cli.constants import EMPTY_SNAPSHOT
from uigen.codec import TreeCodec
from uigen.config import WorkspaceSettings
from uigen.filesystem import FileTree

logger = logging.getLogger(__name__)


def get_console() -> Console:
    """Create Rich console with proper encoding for Windows.

    On Windows in non-interactive mode (subprocess, pipe, etc.), the default
    encoding is often CP1252 which cannot render the tree glyphs. Force a
    terminal without legacy Windows rendering in that case.

    Returns:
        Console: Configured Rich console instance
    """
    if platform.system() == "Windows" and not sys.stdout.isatty():
        os.environ.setdefault("PYTHONIOENCODING", "utf-8")
        return Console(force_terminal=True, legacy_windows=False)
    return Console()


def resolve_log_level(
    cli_level: str | None = None, settings: WorkspaceSettings | None = None
) -> str:
    """Pick the effective log level name.

    Order: command-line option, UIGEN_LOG_LEVEL / LOG_LEVEL, settings file,
    then WARNING.

    Example:
        >>> resolve_log_level("debug")
        'DEBUG'
    """
    level = cli_level or os.getenv("UIGEN_LOG_LEVEL") or os.getenv("LOG_LEVEL")
    if not level and settings is not None:
        level = settings.log_level
    return (level or "warning").upper()


def setup_logging(
    cli_level: str | None = None, settings: WorkspaceSettings | None = None
) -> str:
    """Configure the root logger for this process.

    Logs go to stderr so command output on stdout stays machine-readable.

    Returns:
        The level name that was applied
    """
    level_name = resolve_log_level(cli_level, settings)
    numeric_level = getattr(logging, level_name, logging.WARNING)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,  # Reconfigure if already configured
    )
    logger.debug(f"Logging configured at {level_name}")
    return level_name


def read_snapshot(source: str, codec: TreeCodec) -> FileTree:
    """Decode a snapshot file, or return an empty tree for ``-``.

    Raises:
        FileNotFoundError: If the snapshot file doesn't exist
        MalformedSnapshotError: If the file is not a valid snapshot
    """
    if source == EMPTY_SNAPSHOT:
        return FileTree()

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")
    return codec.decode_json(path.read_text(encoding="utf-8"))


def read_command_lines(path: Path) -> Iterator[str]:
    """Yield the non-blank lines of a JSON-lines command file, lazily."""
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if line:
                yield line
