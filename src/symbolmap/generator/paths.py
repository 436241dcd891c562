"""Path normalization helpers producing stable, comparable path strings."""

from __future__ import annotations

import re

__all__ = ["collapse_separators", "is_absolute_path", "normalize_path"]

_PREFIX = re.compile(
    r"""
    ^(
        [0-9a-z]{2,}+: (?: // (?: [a-z]: )? )?   # protocol://, protocol:, protocol://c:
      | [a-z]:                                  # drive letter
    )
    """,
    re.IGNORECASE | re.VERBOSE,
)
_DRIVE_SUFFIX = re.compile(r"(?:^|://)[a-z]:$", re.IGNORECASE)
_REPEATED_SEPARATORS = re.compile(r"(?<!:)[\\/]{2,}")


def is_absolute_path(path: str) -> bool:
    """Return whether ``path`` is absolute on any supported platform.

    Example:
        >>> is_absolute_path("C:\\\\src"), is_absolute_path("src/Foo.php")
        (True, False)
    """

    return (
        path.startswith("/")
        or path[1:2] == ":"
        or path.startswith("\\\\")
    )


def collapse_separators(path: str) -> str:
    """Collapse runs of slashes/backslashes except right after a scheme."""

    return _REPEATED_SEPARATORS.sub("/", path)


def normalize_path(path: str) -> str:
    """Normalize separators and collapse ``.``/``..`` segments.

    Backslashes become slashes, a trailing slash is dropped, UNC (``//``)
    and ``protocol://``/drive prefixes are preserved and drive letters are
    upper-cased.

    Example:
        >>> normalize_path("c:\\\\foo\\\\..\\\\bar/./Baz.php")
        'C:/bar/Baz.php'
        >>> normalize_path("/a/b/../../../c")
        '/c'
    """

    path = path.replace("\\", "/")
    prefix = ""
    absolute = ""

    if path.startswith("//") and len(path) > 2:
        absolute = "//"
        path = path[2:]

    match = _PREFIX.match(path)
    if match is not None:
        prefix = match.group(1)
        path = path[len(prefix) :]

    if path.startswith("/"):
        absolute = "/"
        path = path[1:]

    parts: list[str] = []
    up = False
    for chunk in path.split("/"):
        if chunk == ".." and (absolute or up):
            if parts:
                parts.pop()
            up = bool(parts) and parts[-1] != ".."
        elif chunk not in (".", ""):
            parts.append(chunk)
            up = chunk != ".."

    prefix = _DRIVE_SUFFIX.sub(lambda m: m.group(0).upper(), prefix)
    return prefix + absolute + "/".join(parts)
