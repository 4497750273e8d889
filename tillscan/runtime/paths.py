"""Centralized path management for tillscan.

Single source of truth for configuration file locations.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent


def _get_config_dir() -> Path:
    """Configuration directory: $TILLSCAN_CONFIG_DIR or ./config."""
    env_dir = os.environ.get("TILLSCAN_CONFIG_DIR")
    if env_dir:
        return Path(env_dir)
    return Path.cwd() / "config"


@dataclass
class ProjectPaths:
    """Container for configuration paths."""

    config: Path = field(default_factory=_get_config_dir)

    def __post_init__(self) -> None:
        self.config = self.config.resolve()

    @property
    def src(self) -> Path:
        """Installed tillscan package directory."""
        return _PACKAGE_ROOT

    @property
    def default_known_stores(self) -> Path:
        """Known-store dictionary shipped with the package."""
        return self.src / "receipt" / "rules" / "known_stores.toml"

    @property
    def known_stores(self) -> Path:
        """Project-level known-store additions."""
        return self.config / "known_stores.toml"


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Return the process-wide ProjectPaths, creating it on first use."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget cached paths so environment changes are picked up (tests)."""
    global _paths
    _paths = None
