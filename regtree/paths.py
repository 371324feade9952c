# regtree/paths.py
"""
Backslash-delimited key paths.

A path names a key by walking from a root: "HKEY_SOFTWARE\\App\\Settings".
The delimiter is not escapable, so a name containing a backslash cannot be
addressed unambiguously.
"""

from typing import Iterable, List, Optional

DELIMITER = "\\"


def split_path(path: str) -> List[str]:
    """
    Split a path into its segments.

    Trailing empty segments are dropped, so "A\\B\\" is ["A", "B"].
    The empty string has no segments.
    """
    if not path:
        return []
    segments = path.split(DELIMITER)
    while segments and segments[-1] == "":
        segments.pop()
    return segments


def is_valid_path(path: str) -> bool:
    """True if path has at least one segment and no empty segments."""
    segments = split_path(path)
    return bool(segments) and all(segments)


def join_path(segments: Iterable[str]) -> str:
    """Join segments into a path."""
    return DELIMITER.join(segments)


def parent_path(path: str) -> Optional[str]:
    """Path minus its last segment, or None for a root (or empty) path."""
    segments = split_path(path)
    if len(segments) <= 1:
        return None
    return join_path(segments[:-1])


def leaf_name(path: str) -> str:
    """Last segment of a path ("" for the empty path)."""
    segments = split_path(path)
    return segments[-1] if segments else ""


def child_path(path: str, name: str) -> str:
    """Path of a direct child."""
    return f"{path}{DELIMITER}{name}" if path else name
