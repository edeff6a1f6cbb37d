"""Path canonicalization for the virtual file tree.

All paths inside a FileTree are absolute, ``/``-separated and case-sensitive.
Raw strings coming from the command source are untrusted: this module turns
them into normalized paths or raises InvalidPathError. Functions here are pure.

Example:
    >>> normalize("src//components/Button.jsx")
    '/src/components/Button.jsx'
    >>> parent("/src/components/Button.jsx")
    '/src/components'
    >>> parent("/") is None
    True
"""

import re

from uigen.exceptions import InvalidPathError

ROOT = "/"
SEPARATOR = "/"

# Control characters (including NUL) and backslashes are never valid
_DISALLOWED = re.compile(r"[\x00-\x1f\x7f\\]")
_REPEATED_SEPARATORS = re.compile(r"/{2,}")


def normalize(raw: str) -> str:
    """Normalize a raw path string.

    Ensures a single leading ``/`` and collapses repeated separators.
    Rejects empty input, ``.``/``..`` segments, a trailing ``/`` on anything
    but the root, and disallowed characters.

    Args:
        raw: Untrusted path string

    Returns:
        Normalized absolute path

    Raises:
        InvalidPathError: If the path cannot be normalized

    Example:
        >>> normalize("App.jsx")
        '/App.jsx'
        >>> normalize("/a/../b")
        Traceback (most recent call last):
        ...
        uigen.exceptions.InvalidPathError: Path contains '..' segment: /a/../b
    """
    if not isinstance(raw, str):
        raise InvalidPathError(f"Path must be a string, got {type(raw).__name__}")

    if raw == "":
        raise InvalidPathError("Path cannot be empty", path=raw)

    if _DISALLOWED.search(raw):
        raise InvalidPathError(f"Path contains disallowed characters: {raw!r}", path=raw)

    collapsed = _REPEATED_SEPARATORS.sub(SEPARATOR, raw)
    if not collapsed.startswith(SEPARATOR):
        collapsed = SEPARATOR + collapsed

    if collapsed == ROOT:
        return ROOT

    if collapsed.endswith(SEPARATOR):
        raise InvalidPathError(f"Path cannot end with '/': {raw}", path=raw)

    for segment in collapsed[1:].split(SEPARATOR):
        if segment == "..":
            raise InvalidPathError(f"Path contains '..' segment: {raw}", path=raw)
        if segment == ".":
            raise InvalidPathError(f"Path contains '.' segment: {raw}", path=raw)

    return collapsed


def segments(path: str) -> list[str]:
    """Split a normalized path into its segments (empty list for the root)."""
    if path == ROOT:
        return []
    return path[1:].split(SEPARATOR)


def parent(path: str) -> str | None:
    """Return the parent of a normalized path, or None for the root.

    Args:
        path: Normalized path

    Returns:
        Parent path, ``None`` when ``path`` is the root
    """
    if path == ROOT:
        return None
    head, _, _ = path.rpartition(SEPARATOR)
    return head or ROOT


def basename(path: str) -> str:
    """Return the final segment of a normalized path (empty string for the root)."""
    if path == ROOT:
        return ""
    return path.rpartition(SEPARATOR)[2]


def join(directory: str, name: str) -> str:
    """Join a normalized directory path and a single child name."""
    if directory == ROOT:
        return ROOT + name
    return directory + SEPARATOR + name


def ancestors(path: str) -> list[str]:
    """Return every proper ancestor of ``path``, root first.

    Example:
        >>> ancestors("/a/b/c.txt")
        ['/', '/a', '/a/b']
    """
    result = []
    current = parent(path)
    while current is not None:
        result.append(current)
        current = parent(current)
    result.reverse()
    return result


def is_descendant(path: str, ancestor: str) -> bool:
    """Check whether ``path`` lies strictly inside ``ancestor``."""
    if path == ancestor:
        return False
    if ancestor == ROOT:
        return True
    return path.startswith(ancestor + SEPARATOR)


def rebase(path: str, old_prefix: str, new_prefix: str) -> str:
    """Move ``path`` from under ``old_prefix`` to under ``new_prefix``.

    ``path`` must be ``old_prefix`` itself or one of its descendants.
    """
    if path == old_prefix:
        return new_prefix
    suffix = path[len(old_prefix) :] if old_prefix != ROOT else path
    if new_prefix == ROOT:
        return suffix
    return new_prefix + suffix
