"""Generator folding per-file declarations into class and function maps."""

from __future__ import annotations

import concurrent.futures
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator, Sequence

from symbolmap.core.logging import Logger, get_logger
from symbolmap.extraction import (
    DEFAULT_STRATEGY,
    ExtractionOutcome,
    SymbolMap,
    create_strategy,
    extract_outcome,
    read_source,
)

from .file_list import FileList
from .paths import collapse_separators, is_absolute_path, normalize_path
from .traversal import has_extension, iter_glob_files, iter_source_files

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from symbolmap.core.config import AppConfig

__all__ = ["ScanPathError", "ScanReport", "SymbolMapGenerator"]

ScanTarget = str | os.PathLike[str] | Iterable[str | os.PathLike[str]]


class ScanPathError(RuntimeError):
    """Raised when a scan target is neither a file, a folder nor a glob."""


@dataclass(slots=True)
class ScanReport:
    """Summary of one :meth:`SymbolMapGenerator.scan_paths` call."""

    scanned: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[ExtractionOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def extend(self, other: ScanReport) -> None:
        self.scanned.extend(other.scanned)
        self.skipped.extend(other.skipped)
        self.failures.extend(other.failures)


@dataclass(frozen=True, slots=True)
class _Candidate:
    path: str
    real_path: str


class SymbolMapGenerator:
    """Scan PHP files and aggregate their declarations.

    Class-like declarations (classes, interfaces, traits and enums) land in
    :attr:`class_map`; functions land in :attr:`function_map`. Files are
    folded in discovery order so canonical paths are reproducible even when
    extraction runs on several threads.

    Example:
        >>> generator = SymbolMapGenerator()
        >>> len(generator.class_map)
        0
    """

    def __init__(
        self,
        extensions: Sequence[str] = ("php", "inc"),
        *,
        strategy: str = DEFAULT_STRATEGY,
        max_workers: int = 1,
        fail_fast: bool = False,
        follow_symlinks: bool = True,
        logger: Logger | None = None,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._extensions = tuple(extensions)
        self._logger = logger or get_logger(__name__, component="generator")
        self._strategy = create_strategy(strategy, logger=self._logger)
        self._max_workers = max_workers
        self._fail_fast = fail_fast
        self._follow_symlinks = follow_symlinks
        self._scanned_files: FileList | None = None
        self._class_map = SymbolMap()
        self._function_map = SymbolMap()

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        *,
        logger: Logger | None = None,
    ) -> SymbolMapGenerator:
        """Build a generator from the ``extraction`` and ``scan`` settings."""

        scan = config.scan
        generator = cls(
            scan.extensions,
            strategy=config.extraction.strategy,
            max_workers=scan.max_workers,
            fail_fast=scan.fail_fast,
            follow_symlinks=scan.follow_symlinks,
            logger=logger,
        )
        if scan.avoid_duplicate_scans:
            generator.avoid_duplicate_scans()
        return generator

    @classmethod
    def create_map(cls, path: ScanTarget) -> dict[str, str]:
        """Scan ``path`` and return its class map as a plain dict."""

        generator = cls()
        generator.scan_paths(path)
        return generator.class_map.get_map()

    @property
    def strategy_name(self) -> str:
        return self._strategy.name

    @property
    def class_map(self) -> SymbolMap:
        return self._class_map

    @property
    def function_map(self) -> SymbolMap:
        return self._function_map

    @property
    def scanned_files(self) -> FileList | None:
        return self._scanned_files

    def avoid_duplicate_scans(
        self,
        file_list: FileList | None = None,
    ) -> SymbolMapGenerator:
        """Never scan the same real path twice across ``scan_paths`` calls.

        A shared :class:`FileList` lets several generators cooperate.
        """

        self._scanned_files = file_list if file_list is not None else FileList()
        return self

    def scan_paths(
        self,
        path: ScanTarget,
        excluded: str | re.Pattern[str] | None = None,
        excluded_dirs: Sequence[str] = (),
    ) -> ScanReport:
        """Scan ``path`` and fold every declaration into the maps.

        Args:
            path: A file, a folder, a glob pattern, or an iterable of files.
            excluded: Regular expression of file paths to leave out.
            excluded_dirs: gitwildmatch patterns pruned below scanned folders.

        Raises:
            ScanPathError: If a string ``path`` is neither a file, a folder
                nor a glob pattern.
            ExtractionError: On the first malformed file when the generator
                fails fast.
            OSError: If a file cannot be read.
        """

        pattern = re.compile(excluded) if isinstance(excluded, str) else excluded
        report = ScanReport()
        candidates = self._collect(path, pattern, excluded_dirs, report)

        for candidate, outcome in zip(candidates, self._extract(candidates)):
            if not outcome.ok:
                self._logger.warning(
                    "symbol-scan-failed",
                    path=candidate.path,
                    error=str(outcome.error),
                )
                if self._fail_fast:
                    outcome.unwrap()
                report.failures.append(outcome)
                continue

            symbols = outcome.unwrap()
            if self._scanned_files is not None:
                self._scanned_files.add(candidate.real_path)
            self._class_map.record_all(symbols.class_like(), candidate.path)
            self._function_map.record_all(symbols.functions(), candidate.path)
            report.scanned.append(candidate.path)

        self._logger.info(
            "symbol-scan-complete",
            scanned=len(report.scanned),
            skipped=len(report.skipped),
            failed=len(report.failures),
            classes=len(self._class_map),
            functions=len(self._function_map),
        )
        return report

    def _expand(
        self,
        path: ScanTarget,
        excluded_dirs: Sequence[str],
    ) -> Iterator[str]:
        if not isinstance(path, (str, os.PathLike)):
            for item in path:
                yield os.fspath(item)
            return

        target = os.fspath(path)
        options = {
            "extensions": self._extensions,
            "exclude_dirs": excluded_dirs,
            "follow_symlinks": self._follow_symlinks,
        }
        if os.path.isfile(target):
            yield target
        elif os.path.isdir(target):
            for file_path in iter_source_files(Path(target), **options):
                yield str(file_path)
        elif "*" in target:
            for file_path in iter_glob_files(target, **options):
                yield str(file_path)
        else:
            raise ScanPathError(
                f'Could not scan for symbols inside "{target}" which does '
                "not appear to be a file nor a folder"
            )

    def _collect(
        self,
        path: ScanTarget,
        excluded: re.Pattern[str] | None,
        excluded_dirs: Sequence[str],
        report: ScanReport,
    ) -> list[_Candidate]:
        cwd = os.path.realpath(os.getcwd())
        seen: set[str] = set()
        candidates: list[_Candidate] = []

        for raw in self._expand(path, excluded_dirs):
            if not has_extension(raw, self._extensions):
                self._skip(report, raw, "extension")
                continue

            if is_absolute_path(raw):
                file_path = collapse_separators(raw)
            else:
                file_path = normalize_path(f"{cwd}/{raw}")
            real_path = os.path.realpath(file_path)

            if self._scanned_files is not None and (
                real_path in seen or self._scanned_files.contains(real_path)
            ):
                self._skip(report, file_path, "duplicate")
                continue
            if excluded is not None and (
                excluded.search(real_path.replace("\\", "/"))
                or excluded.search(file_path.replace("\\", "/"))
            ):
                self._skip(report, file_path, "excluded")
                continue

            seen.add(real_path)
            candidates.append(_Candidate(file_path, real_path))
        return candidates

    def _skip(self, report: ScanReport, path: str, reason: str) -> None:
        self._logger.debug("symbol-scan-skip", path=path, reason=reason)
        report.skipped.append(path)

    def _extract_one(self, candidate: _Candidate) -> ExtractionOutcome:
        source = read_source(candidate.path)
        return extract_outcome(self._strategy, source, candidate.path)

    def _extract(
        self,
        candidates: Sequence[_Candidate],
    ) -> Iterator[ExtractionOutcome]:
        if self._max_workers == 1 or len(candidates) < 2:
            for candidate in candidates:
                yield self._extract_one(candidate)
            return

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="symbolmap",
        ) as executor:
            # ``map`` yields in submission order.
            yield from executor.map(self._extract_one, candidates)
