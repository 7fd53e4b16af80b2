"""Dynamic content entries and source pairs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntryKind(str, Enum):
    """Kind of a dynamic content stack entry."""

    GLOBAL = "global"
    LOCAL = "local"
    COMPONENT = "component"
    COMPONENT_SLOTS = "component-slots"
    SLOT = "slot"
    PREVIEW = "preview"


@dataclass(frozen=True, slots=True)
class SourcePair:
    """Keyed view of an entry, as consumed by the resolver."""

    key: str
    source: Any


@dataclass(frozen=True, slots=True)
class DynamicContentEntry:
    """One typed item on the dynamic content stack.

    Entries without a key are structural markers: they stay on the stack
    but never become a source.
    """

    kind: EntryKind
    key: str | None = None
    source: Any = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def to_source(self) -> SourcePair | None:
        if not self.key:
            return None
        return SourcePair(self.key, self.source)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind.value, "source": self.source}
        if self.key is not None:
            data["key"] = self.key
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DynamicContentEntry:
        """Build an entry from ``{"type", "key", "source", "metadata"}``.

        Unknown types fall back to ``local``.
        """
        try:
            kind = EntryKind(data.get("type", EntryKind.LOCAL.value))
        except ValueError:
            kind = EntryKind.LOCAL
        key = data.get("key")
        metadata = data.get("metadata")
        return cls(
            kind=kind,
            key=key if isinstance(key, str) and key else None,
            source=data.get("source"),
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        )

    @classmethod
    def global_(cls, key: str, source: Any) -> DynamicContentEntry:
        return cls(EntryKind.GLOBAL, key, source)

    @classmethod
    def local(cls, key: str, source: Any, **metadata: Any) -> DynamicContentEntry:
        return cls(EntryKind.LOCAL, key, source, metadata)
