"""Runtime infrastructure for tillscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Known-store dictionary loading via load_known_stores()

Usage:
    from tillscan.runtime import get_logger, get_paths

    logger = get_logger(__name__)
    paths = get_paths()
    print(paths.config, paths.known_stores)
"""

from tillscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from tillscan.runtime.paths import ProjectPaths, get_paths, reset_paths
from tillscan.runtime.store_rules import load_known_stores

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_known_stores",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
