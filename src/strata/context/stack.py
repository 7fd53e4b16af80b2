"""Ordered stack of dynamic content entries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from strata.context.entry import DynamicContentEntry, EntryKind, SourcePair
from strata.environment.exceptions import FrameImbalanceError


class DynamicContentStack:
    """Append-only (within a frame) list of dynamic content entries.

    A frame is a push/pop pair around one block render. Use
    :meth:`push_scoped` so the pop happens on every exit path.

    Example:
        >>> stack = DynamicContentStack()
        >>> with stack.push_scoped(DynamicContentEntry.local("item", {"a": 1})):
        ...     stack.to_sources()
        [SourcePair(key='item', source={'a': 1})]
        >>> len(stack)
        0
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[DynamicContentEntry] = ()):
        self._entries: list[DynamicContentEntry] = list(entries)

    @classmethod
    def from_mixed(cls, entries: Iterable[DynamicContentEntry | Mapping[str, Any]]) -> DynamicContentStack:
        """Build a stack from entries and/or entry dicts."""
        return cls(
            entry if isinstance(entry, DynamicContentEntry) else DynamicContentEntry.from_dict(entry)
            for entry in entries
        )

    def push(self, entry: DynamicContentEntry) -> None:
        self._entries.append(entry)

    def pop(self) -> DynamicContentEntry:
        """Remove and return the newest entry.

        Raises:
            FrameImbalanceError: If the stack is empty
        """
        if not self._entries:
            raise FrameImbalanceError("dynamic content stack")
        return self._entries.pop()

    @contextmanager
    def push_scoped(self, *entries: DynamicContentEntry) -> Iterator[DynamicContentStack]:
        """Push ``entries`` for the duration of the ``with`` block."""
        for entry in entries:
            self.push(entry)
        try:
            yield self
        finally:
            for _ in entries:
                self.pop()

    def with_pushed(self, *entries: DynamicContentEntry) -> DynamicContentStack:
        """New stack with ``entries`` appended; this one is unchanged."""
        return DynamicContentStack([*self._entries, *entries])

    def only_kind(self, kind: EntryKind) -> list[DynamicContentEntry]:
        return [e for e in self._entries if e.kind == kind]

    def without_kind(self, kind: EntryKind) -> list[DynamicContentEntry]:
        return [e for e in self._entries if e.kind != kind]

    def to_sources(self) -> list[SourcePair]:
        """Keyed entries as source pairs, in stack order."""
        return entries_to_sources(self._entries)

    def all(self) -> list[DynamicContentEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DynamicContentEntry]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"<DynamicContentStack entries={len(self._entries)}>"


def entries_to_sources(entries: Iterable[DynamicContentEntry]) -> list[SourcePair]:
    """Drop keyless entries and convert the rest to source pairs."""
    return [pair for pair in (entry.to_source() for entry in entries) if pair is not None]
