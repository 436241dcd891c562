"""Command-line interface primitives for :mod:`symbolmap`.

This module exposes the Typer application behind the ``symbolmap`` console
script and wires the commands into the extraction engine and the generator.

Example:
    >>> import typer
    >>> from symbolmap.cli import create_app
    >>> app = create_app()
    >>> isinstance(app, typer.Typer)
    True
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import typer
from pydantic import ValidationError

from symbolmap.core.config import (
    AppConfig,
    env_overrides,
    load_config,
    read_config_file,
    render_config,
)
from symbolmap.core.logging import Logger, configure_logging, get_logger
from symbolmap.extraction import (
    ExtractionError,
    SymbolMap,
    create_strategy,
    read_source,
)
from symbolmap.generator import ScanPathError, ScanReport, SymbolMapGenerator

_app_help = (
    "Map fully-qualified PHP declarations to the files declaring them."
    "\n\n"
    "Use `symbolmap scan PATH` to build a class map for a source tree."
)


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _load_app_config(
    config_path: Path | None,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Resolve configuration layers, turning failures into CLI errors."""

    try:
        user_config = read_config_file(str(config_path)) if config_path else None
        return load_config(
            user_config=user_config,
            env_config=env_overrides(os.environ),
            cli_overrides=overrides,
        )
    except OSError as exc:
        raise _fail(f"Could not read config file: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise _fail(f"Invalid config file {config_path}: {exc}") from exc
    except ValidationError as exc:
        raise _fail(f"Invalid configuration: {exc}") from exc


def _build_overrides(
    *,
    log_level: str | None = None,
    strategy: str | None = None,
    exclude: str | None = None,
    exclude_dirs: list[str] | None = None,
    workers: int | None = None,
    fail_fast: bool | None = None,
    no_ambiguous_filter: bool = False,
) -> dict[str, Any]:
    """Translate CLI options into a config layer, omitting unset values."""

    overrides: dict[str, Any] = {}
    if log_level:
        overrides["log_level"] = log_level
    if strategy:
        overrides["extraction"] = {"strategy": strategy}

    scan: dict[str, Any] = {}
    if exclude is not None:
        scan["exclude_pattern"] = exclude
    if exclude_dirs:
        scan["exclude_dirs"] = list(exclude_dirs)
    if workers is not None:
        scan["max_workers"] = workers
    if fail_fast is not None:
        scan["fail_fast"] = fail_fast
    if no_ambiguous_filter:
        scan["ambiguous_filter"] = None
    if scan:
        overrides["scan"] = scan
    return overrides


def _configure(config: AppConfig, log_file: Path | None, command: str) -> Logger:
    try:
        configure_logging(level=config.log_level, log_file=log_file)
    except ValueError as exc:
        raise _fail(str(exc)) from exc
    return get_logger(__name__, command=command)


def _report_ambiguous(
    symbol_map: SymbolMap,
    ambiguous: Mapping[str, list[str]],
) -> None:
    for name, paths in ambiguous.items():
        others = ", ".join(f'"{path}"' for path in paths)
        typer.secho(
            f'Warning: Ambiguous symbol resolution, "{name}" was found in '
            f'both "{symbol_map.get_symbol_path(name)}" and {others}, '
            "the first will be used.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _report_failures(report: ScanReport) -> None:
    for outcome in report.failures:
        typer.secho(
            f"Failed to scan {outcome.path}: {outcome.error}",
            fg=typer.colors.RED,
            err=True,
        )


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``symbolmap`` CLI.

    Example:
        >>> import typer
        >>> from symbolmap.cli import create_app
        >>> cli = create_app()
        >>> isinstance(cli, typer.Typer)
        True
    """

    app = typer.Typer(
        help=_app_help,
        no_args_is_help=True,
        rich_markup_mode="rich",
        invoke_without_command=False,
        cls=typer.core.TyperGroup,
    )

    @app.callback()
    def main_callback() -> None:
        """Top-level CLI callback ensuring subcommands are dispatched."""

        return None

    @app.command(
        "extract",
        help="Print the declarations found in a single file as JSON.",
    )
    def extract_command(
        file: Path = typer.Argument(..., help="PHP file to inspect."),
        strategy: str | None = typer.Option(
            None,
            "--strategy",
            "-s",
            help="Extraction strategy (text or token).",
        ),
        config_path: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="TOML file layered over the packaged defaults.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
    ) -> None:
        """Extract the declarations of one file.

        Example:
            >>> from typer.testing import CliRunner
            >>> result = CliRunner().invoke(create_app(), ["extract", "--help"])
            >>> result.exit_code
            0
        """

        config = _load_app_config(
            config_path,
            _build_overrides(log_level=log_level, strategy=strategy),
        )
        logger = _configure(config, None, "extract")
        extractor = create_strategy(config.extraction.strategy, logger=logger)

        try:
            symbols = extractor.extract(read_source(file))
        except OSError as exc:
            raise _fail(f"Could not read {file}: {exc}") from exc
        except ExtractionError as exc:
            raise _fail(f"Failed to extract {file}: {exc}") from exc

        logger.info("extract-complete", path=str(file), symbols=len(symbols))
        typer.echo(json.dumps(symbols.get_all(), indent=2))

    @app.command(
        "scan",
        help="Scan files or folders and print the resulting symbol map.",
    )
    def scan_command(  # noqa: PLR0913 - CLI surface area intentionally explicit
        paths: list[str] = typer.Argument(
            ...,
            metavar="PATH...",
            help="Files, folders or glob patterns to scan.",
        ),
        exclude: str | None = typer.Option(
            None,
            "--exclude",
            "-x",
            help="Regular expression of file paths to leave out.",
        ),
        exclude_dir: list[str] = typer.Option(
            None,
            "--exclude-dir",
            "-X",
            metavar="PATTERN",
            help="gitwildmatch pattern of folders to prune (repeatable).",
        ),
        strategy: str | None = typer.Option(
            None,
            "--strategy",
            "-s",
            help="Extraction strategy (text or token).",
        ),
        functions: bool = typer.Option(
            False,
            "--functions",
            help="Emit the function map instead of the class map.",
        ),
        no_ambiguous_filter: bool = typer.Option(
            False,
            "--no-ambiguous-filter",
            help="Report ambiguous symbols found in test and fixture folders.",
        ),
        workers: int | None = typer.Option(
            None,
            "--workers",
            "-j",
            min=1,
            help="Threads used to extract files concurrently.",
        ),
        fail_fast: bool | None = typer.Option(
            None,
            "--fail-fast/--keep-going",
            help="Abort on the first malformed file.",
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write the JSON map to this file instead of stdout.",
        ),
        config_path: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="TOML file layered over the packaged defaults.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            "-l",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
        log_file: Path | None = typer.Option(
            None,
            "--log-file",
            help="Also write JSON log lines to this file.",
        ),
    ) -> None:
        """Build a class (or function) map for the given paths."""

        config = _load_app_config(
            config_path,
            _build_overrides(
                log_level=log_level,
                strategy=strategy,
                exclude=exclude,
                exclude_dirs=exclude_dir,
                workers=workers,
                fail_fast=fail_fast,
                no_ambiguous_filter=no_ambiguous_filter,
            ),
        )
        logger = _configure(config, log_file, "scan")
        generator = SymbolMapGenerator.from_config(config, logger=logger)

        report = ScanReport()
        try:
            for path in paths:
                report.extend(
                    generator.scan_paths(
                        path,
                        excluded=config.scan.exclude_pattern,
                        excluded_dirs=config.scan.exclude_dirs,
                    )
                )
        except ScanPathError as exc:
            raise _fail(str(exc)) from exc
        except ExtractionError as exc:
            raise _fail(f"Scan aborted: {exc}") from exc
        except OSError as exc:
            raise _fail(f"Could not read source file: {exc}") from exc

        symbol_map = generator.function_map if functions else generator.class_map
        symbol_map.sort()
        payload = json.dumps(symbol_map.get_map(), indent=2)

        if output is not None:
            try:
                output.write_text(payload + "\n", encoding="utf-8")
            except OSError as exc:
                raise _fail(f"Could not write {output}: {exc}") from exc
            typer.secho(
                f"Wrote {len(symbol_map)} symbols to {output}",
                fg=typer.colors.GREEN,
                err=True,
            )
        else:
            typer.echo(payload)

        ambiguous = symbol_map.get_ambiguous_symbols(
            config.scan.ambiguous_filter or False
        )
        _report_ambiguous(symbol_map, ambiguous)
        _report_failures(report)

        logger.info(
            "scan-complete",
            paths=list(paths),
            scanned=len(report.scanned),
            symbols=len(symbol_map),
            ambiguous=len(ambiguous),
            failed=len(report.failures),
        )
        if not report.ok:
            raise typer.Exit(code=1)

    @app.command(
        "config",
        help="Print the effective configuration as TOML.",
    )
    def config_command(
        config_path: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="TOML file layered over the packaged defaults.",
        ),
    ) -> None:
        """Render the merged configuration."""

        config = _load_app_config(config_path)
        typer.echo(render_config(config), nl=False)

    return app


__all__ = ["create_app"]
