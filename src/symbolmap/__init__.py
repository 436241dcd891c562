"""Top-level package for :mod:`symbolmap`.

The package maps fully-qualified PHP declaration names to the files that
declare them and exposes version metadata for the installed build.

Example:
    >>> from symbolmap import __version__
    >>> __version__.split(".")[0]
    '0'
"""

from importlib import metadata

try:
    __version__ = metadata.version("symbolmap")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for source checkouts
    __version__ = "0.0.0"

__all__ = ["__version__"]
