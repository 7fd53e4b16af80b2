"""Pattern model and the per-request pattern cache."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from strata.blocks.base import Block, blocks_from
from strata.environment.exceptions import PatternNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PropDefinition:
    """Declared component property.

    ``primitive`` is one of ``string``, ``number``, ``boolean``, ``array``
    or ``object``. A ``specialized`` value of ``array`` marks a loop prop.
    """

    key: str
    primitive: str = "string"
    specialized: str | None = None
    default: Any = None

    @property
    def is_loop(self) -> bool:
        return self.specialized == "array"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PropDefinition | None:
        """Build from ``{"key", "type": {"primitive", "specialized"}, "default"}``.

        Returns None when ``key`` is missing.
        """
        key = data.get("key")
        if not isinstance(key, str) or not key:
            return None
        type_info = data.get("type")
        if isinstance(type_info, Mapping):
            primitive = type_info.get("primitive") or "string"
            specialized = type_info.get("specialized")
        else:
            primitive = type_info if isinstance(type_info, str) and type_info else "string"
            specialized = None
        return cls(key=key, primitive=primitive, specialized=specialized, default=data.get("default"))


@dataclass(frozen=True, slots=True)
class Pattern:
    """Reusable component body plus its declared props."""

    id: str
    blocks: Sequence[Block] = ()
    props: Sequence[PropDefinition] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, ref: str | int, data: Mapping[str, Any]) -> Pattern:
        raw_props = data.get("props", data.get("properties")) or ()
        props = tuple(
            prop
            for prop in (
                item if isinstance(item, PropDefinition) else PropDefinition.from_dict(item)
                for item in raw_props
                if isinstance(item, (PropDefinition, Mapping))
            )
            if prop is not None
        )
        return cls(id=str(ref), blocks=blocks_from(data.get("blocks")), props=props)


class PatternLoader(Protocol):
    """Source of patterns; raises PatternNotFoundError for unknown refs."""

    def get_pattern(self, ref: str) -> Pattern: ...

    def list_patterns(self) -> list[str]: ...


class PatternCache:
    """Memoizes pattern lookups, including misses.

    A ref that failed to load is cached as ``None`` so an invalid reference
    repeated on a page costs one loader call.

    Example:
        >>> cache = PatternCache(DictLoader({"7": {"blocks": []}}))
        >>> cache.get("7").id
        '7'
        >>> cache.get("404") is None
        True
    """

    __slots__ = ("_loader", "_entries", "_hits", "_misses")

    def __init__(self, loader: PatternLoader | None):
        self._loader = loader
        self._entries: dict[str, Pattern | None] = {}
        self._hits = 0
        self._misses = 0

    def get(self, ref: str | int | None) -> Pattern | None:
        if ref is None or ref == "":
            return None
        key = str(ref)
        if key in self._entries:
            self._hits += 1
            return self._entries[key]

        self._misses += 1
        pattern: Pattern | None = None
        if self._loader is not None:
            try:
                pattern = self._loader.get_pattern(key)
            except PatternNotFoundError as e:
                logger.debug(f"Pattern lookup failed: {e}")
        self._entries[key] = pattern
        return pattern

    def get_blocks(self, ref: str | int | None) -> Sequence[Block]:
        pattern = self.get(ref)
        return pattern.blocks if pattern else ()

    def get_props(self, ref: str | int | None) -> Sequence[PropDefinition]:
        pattern = self.get(ref)
        return pattern.props if pattern else ()

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict[str, int]:
        return {"hits": self._hits, "misses": self._misses, "size": len(self._entries)}

    def __len__(self) -> int:
        return len(self._entries)
