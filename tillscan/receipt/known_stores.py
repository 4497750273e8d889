"""Immutable known-merchant dictionary used for store name matching."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


MIN_KEY_LENGTH = 3  # Shorter keys ("TT") would match inside ordinary words


def normalize_store_text(text: str) -> str:
    """Uppercase and drop everything that is not a letter."""
    return re.sub(r"[^A-Z]", "", text.upper())


@dataclass(frozen=True)
class KnownStore:
    """A merchant display name plus the spellings that identify it."""

    name: str
    aliases: tuple[str, ...] = ()

    @property
    def keys(self) -> tuple[str, ...]:
        keys = [normalize_store_text(self.name)]
        keys.extend(normalize_store_text(alias) for alias in self.aliases)
        return tuple(key for key in keys if len(key) >= MIN_KEY_LENGTH)


@dataclass(frozen=True)
class KnownStoreDictionary:
    """Read-only lookup table of known merchants."""

    stores: tuple[KnownStore, ...] = ()
    # (normalized key, display name), longest key first
    _index: tuple[tuple[str, str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pairs = {}
        for store in self.stores:
            for key in store.keys:
                # First definition of a key wins
                pairs.setdefault(key, store.name)
        index = tuple(sorted(pairs.items(), key=lambda pair: len(pair[0]), reverse=True))
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.stores)

    def match(self, text: str) -> str | None:
        """Return the display name of the first known store contained in text."""
        normalized = normalize_store_text(text)
        if not normalized:
            return None
        for key, display_name in self._index:
            if key in normalized:
                return display_name
        return None


EMPTY_STORE_DICTIONARY = KnownStoreDictionary()


def build_known_store_dictionary(configs: Iterable[Mapping[str, Any]]) -> KnownStoreDictionary:
    """
    Build a dictionary from parsed TOML configs.

    Each config may hold ``[[stores]]`` tables with ``name`` and optional
    ``aliases``. Later configs extend earlier ones.
    """
    stores: list[KnownStore] = []
    for config in configs:
        for entry in config.get("stores", []):
            name = str(entry.get("name", "")).strip()
            if not name:
                continue
            aliases = tuple(str(alias) for alias in entry.get("aliases", []))
            stores.append(KnownStore(name=name, aliases=aliases))
    return KnownStoreDictionary(stores=tuple(stores))
