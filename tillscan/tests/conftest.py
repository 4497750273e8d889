"""Shared pytest fixtures for tillscan tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from pathlib import Path

import pytest

from tillscan.receipt.known_stores import KnownStoreDictionary
from tillscan.runtime.paths import get_paths, reset_paths
from tillscan.runtime.store_rules import load_known_stores


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point TILLSCAN_CONFIG_DIR at an empty directory so a local config/ never leaks in."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("TILLSCAN_CONFIG_DIR", str(config_dir))
    reset_paths()
    load_known_stores.cache_clear()
    yield config_dir
    reset_paths()
    load_known_stores.cache_clear()


@pytest.fixture
def known_stores() -> KnownStoreDictionary:
    """The dictionary bundled with the package."""
    return load_known_stores((str(get_paths().default_known_stores),))


@pytest.fixture
def today() -> date:
    return date(2024, 6, 1)
