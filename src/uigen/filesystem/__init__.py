"""Virtual file tree and path handling."""

from uigen.filesystem.paths import ROOT, normalize
from uigen.filesystem.tree import Entry, EntryKind, FileTree

__all__ = [
    "ROOT",
    "normalize",
    "Entry",
    "EntryKind",
    "FileTree",
]
