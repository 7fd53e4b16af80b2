"""Per-request cache of materialized loop data."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any


class LoopDataCache:
    """Loop items keyed by loop id plus the full parameter set.

    Parameters are part of the key, so ``$count: 2`` and ``$count: 3``
    never share an entry. Key order does not matter.
    """

    __slots__ = ("_entries", "_hits", "_misses")

    def __init__(self) -> None:
        self._entries: dict[str, list[Any]] = {}
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(loop_id: str, params: Mapping[str, Any] | None = None) -> str:
        payload = json.dumps(dict(params or {}), sort_keys=True, default=str)
        return hashlib.sha256(f"{loop_id}\x00{payload}".encode()).hexdigest()

    def get(self, loop_id: str, params: Mapping[str, Any] | None = None) -> list[Any] | None:
        items = self._entries.get(self.make_key(loop_id, params))
        if items is None:
            self._misses += 1
        else:
            self._hits += 1
        return items

    def set(self, loop_id: str, params: Mapping[str, Any] | None, items: list[Any]) -> None:
        self._entries[self.make_key(loop_id, params)] = items

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict[str, int]:
        return {"hits": self._hits, "misses": self._misses, "size": len(self._entries)}

    def __len__(self) -> int:
        return len(self._entries)
