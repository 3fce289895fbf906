"""Cached list of distinct brands available in the catalog."""

from __future__ import annotations

import threading
from typing import Callable, Iterable


class BrandCatalog:
    """Loads brand names once and serves them until :meth:`evict` is called."""

    def __init__(self, loader: Callable[[], Iterable[str | None]]) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._cache: list[str] | None = None

    def brands(self) -> list[str]:
        cached = self._cache
        if cached is not None:
            return cached

        loaded = self._normalize(self._loader())
        with self._lock:
            if self._cache is None:
                self._cache = loaded
            return self._cache

    def evict(self) -> None:
        with self._lock:
            self._cache = None

    @staticmethod
    def _normalize(raw: Iterable[str | None]) -> list[str]:
        seen: set[str] = set()
        unique: list[str] = []
        for value in raw:
            if value is None:
                continue
            name = value.strip()
            if name and name not in seen:
                seen.add(name)
                unique.append(name)
        return sorted(unique, key=str.casefold)
