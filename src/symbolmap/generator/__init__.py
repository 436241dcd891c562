"""Discovery and aggregation of PHP declarations across many files."""

from __future__ import annotations

from .file_list import FileList
from .paths import collapse_separators, is_absolute_path, normalize_path
from .service import ScanPathError, ScanReport, SymbolMapGenerator
from .traversal import iter_glob_files, iter_source_files

__all__ = [
    "FileList",
    "ScanPathError",
    "ScanReport",
    "SymbolMapGenerator",
    "collapse_separators",
    "is_absolute_path",
    "iter_glob_files",
    "iter_source_files",
    "normalize_path",
]
