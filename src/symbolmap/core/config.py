"""Configuration models and loaders for :mod:`symbolmap`."""

from __future__ import annotations

import re
from collections.abc import Mapping as MappingABC
from typing import Any, Literal, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from symbolmap.resources import get_resource

DEFAULTS_RESOURCE_NAME = "symbolmap.defaults.toml"
ENV_PREFIX = "SYMBOLMAP_"

StrategyName = Literal["text", "token"]


class ExtractionSettings(BaseModel):
    """Settings controlling how individual files are scanned."""

    strategy: StrategyName = Field(
        default="text",
        description="Extraction strategy used for every file.",
    )

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator("strategy", mode="before")
    @classmethod
    def _lower_strategy(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class ScanSettings(BaseModel):
    """Settings for discovering files and folding them into symbol maps."""

    extensions: tuple[str, ...] = Field(
        default=("php", "inc"),
        description="File extensions (without dot) considered for scanning.",
    )
    exclude_dirs: tuple[str, ...] = Field(
        default_factory=tuple,
        description="gitwildmatch patterns excluded below scanned folders.",
    )
    exclude_pattern: str | None = Field(
        default=None,
        description="Regular expression of file paths to skip.",
    )
    ambiguous_filter: str | None = Field(
        default=r"(?i)/(test|fixture|example|stub)s?/",
        description=(
            "Regular expression of ambiguous paths to hide; ``null`` reports "
            "every ambiguous path."
        ),
    )
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Threads used to extract files concurrently.",
    )
    fail_fast: bool = Field(
        default=False,
        description="Abort the scan on the first malformed file.",
    )
    avoid_duplicate_scans: bool = Field(
        default=True,
        description="Skip files already scanned earlier in the same run.",
    )
    follow_symlinks: bool = Field(
        default=True,
        description="Descend into symlinked directories while scanning.",
    )

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized = tuple(ext.strip().lstrip(".") for ext in value)
        if not normalized or not all(normalized):
            raise ValueError("At least one non-empty extension is required.")
        return normalized

    @field_validator("exclude_pattern", "ambiguous_filter", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("exclude_pattern", "ambiguous_filter")
    @classmethod
    def _validate_regex(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(
                f"Invalid regular expression {value!r}: {exc}"
            ) from exc
        return value


class AppConfig(BaseModel):
    """Root configuration for the :mod:`symbolmap` application."""

    log_level: str = Field(
        default="WARNING",
        description="Default logging level for the application runtime.",
    )
    extraction: ExtractionSettings = Field(
        default_factory=ExtractionSettings,
        description="Per-file extraction settings.",
    )
    scan: ScanSettings = Field(
        default_factory=ScanSettings,
        description="File discovery and aggregation settings.",
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @model_validator(mode="after")
    def _post_process(self) -> "AppConfig":
        object.__setattr__(self, "log_level", self.log_level.upper())
        return self


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content."""

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> load_packaged_defaults()["extraction"]["strategy"]
        'text'
    """

    return tomllib.loads(read_packaged_defaults_text())


def read_config_file(path: str) -> dict[str, Any]:
    """Parse a user TOML configuration file.

    Raises:
        OSError: If the file cannot be read.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """

    with open(path, "rb") as handle:
        return tomllib.load(handle)


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``SYMBOLMAP_*`` environment variables into a config layer.

    Example:
        >>> env_overrides({"SYMBOLMAP_STRATEGY": "token"})
        {'extraction': {'strategy': 'token'}}
    """

    layer: dict[str, Any] = {}
    level = environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if level:
        layer["log_level"] = level
    strategy = environ.get(f"{ENV_PREFIX}STRATEGY")
    if strategy:
        layer["extraction"] = {"strategy": strategy}
    return layer


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    *,
    defaults: Mapping[str, Any] | None = None,
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load configuration according to the precedence stack.

    Later layers win: packaged defaults, then the user file, then the
    environment, then CLI flags.

    Raises:
        pydantic.ValidationError: If the merged values are invalid.
    """

    stack: dict[str, Any] = dict(
        load_packaged_defaults() if defaults is None else defaults
    )
    for layer in (user_config, env_config, cli_overrides):
        if layer:
            stack = _deep_merge(stack, layer)
    return AppConfig.model_validate(stack)


def render_config(config: AppConfig) -> str:
    """Render ``config`` as a TOML document."""

    document = tomlkit.document()
    document.add(tomlkit.comment("Effective symbolmap configuration"))
    document["log_level"] = config.log_level

    extraction = tomlkit.table()
    extraction["strategy"] = config.extraction.strategy
    document["extraction"] = extraction

    scan = tomlkit.table()
    settings = config.scan
    scan["extensions"] = list(settings.extensions)
    scan["exclude_dirs"] = list(settings.exclude_dirs)
    scan["exclude_pattern"] = settings.exclude_pattern or ""
    scan["ambiguous_filter"] = settings.ambiguous_filter or ""
    scan["max_workers"] = settings.max_workers
    scan["fail_fast"] = settings.fail_fast
    scan["avoid_duplicate_scans"] = settings.avoid_duplicate_scans
    scan["follow_symlinks"] = settings.follow_symlinks
    document["scan"] = scan

    return tomlkit.dumps(document)


__all__ = [
    "AppConfig",
    "DEFAULTS_RESOURCE_NAME",
    "ENV_PREFIX",
    "ExtractionSettings",
    "ScanSettings",
    "StrategyName",
    "env_overrides",
    "load_config",
    "load_packaged_defaults",
    "read_config_file",
    "read_packaged_defaults_text",
    "render_config",
]
