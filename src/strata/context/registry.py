"""Globally enqueued sources.

``SourceRegistry`` keeps insertion order and moves a re-enqueued key to the
end, so the most recent enqueue also wins last-key resolution.
``PreviewRegistry`` overwrites in place; preview sources always come after
everything else on the stack.
"""

from __future__ import annotations

from typing import Any

from strata.context.entry import DynamicContentEntry, EntryKind


class SourceRegistry:
    """Insertion-ordered ``key -> source`` map of enqueued sources."""

    __slots__ = ("_sources", "_kind")

    def __init__(self, kind: EntryKind = EntryKind.GLOBAL):
        self._sources: dict[str, Any] = {}
        self._kind = kind

    def enqueue(self, key: str, source: Any) -> None:
        """Register ``source`` under ``key``, moving the key to the end."""
        if not key or not key.strip():
            return
        self._sources.pop(key, None)
        self._sources[key] = source

    def dequeue(self, key: str) -> None:
        self._sources.pop(key, None)

    def list(self) -> list[DynamicContentEntry]:
        return [DynamicContentEntry(self._kind, key, source) for key, source in self._sources.items()]

    def clear(self) -> None:
        self._sources.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._sources

    def __len__(self) -> int:
        return len(self._sources)


class PreviewRegistry(SourceRegistry):
    """Preview sources; re-enqueueing keeps the original position."""

    __slots__ = ()

    def __init__(self) -> None:
        super().__init__(EntryKind.PREVIEW)

    def enqueue(self, key: str, source: Any) -> None:
        if not key or not key.strip():
            return
        self._sources[key] = source
