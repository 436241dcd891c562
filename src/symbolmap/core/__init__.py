"""Core utilities shared across :mod:`symbolmap` packages.

The core namespace provides configuration loading and logging setup so the
extraction engine and the CLI stay free of plumbing.
"""

from __future__ import annotations

from .config import AppConfig, load_config
from .logging import Logger, configure_logging, get_logger

__all__ = [
    "AppConfig",
    "Logger",
    "configure_logging",
    "get_logger",
    "load_config",
]
