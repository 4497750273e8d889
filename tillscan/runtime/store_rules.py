"""Runtime loader for the known-store dictionary."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from tillscan.receipt.known_stores import KnownStoreDictionary, build_known_store_dictionary
from tillscan.runtime.logging import get_logger
from tillscan.runtime.paths import get_paths

logger = get_logger(__name__)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


@lru_cache(maxsize=4)
def load_known_stores(config_paths: tuple[str, ...] | None = None) -> KnownStoreDictionary:
    """
    Load the known-store dictionary once per distinct set of files.

    Args:
        config_paths: Optional TOML paths. If None, the bundled dictionary is
            loaded followed by the project-level config/known_stores.toml.

    Returns:
        Immutable dictionary shared by every caller.
    """
    if config_paths is None:
        p = get_paths()
        files = [p.default_known_stores, p.known_stores]
    else:
        files = [Path(path) for path in config_paths]

    configs = tuple(_load_toml(path) for path in files)
    dictionary = build_known_store_dictionary(configs)
    logger.debug("Loaded %d known stores from %s", len(dictionary), ", ".join(str(f) for f in files))
    return dictionary
