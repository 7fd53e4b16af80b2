"""Loop presets: named, reusable loop configurations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class HandlerType(str, Enum):
    """Backing data source of a loop preset."""

    STRUCTURED_DATA = "json"
    ENTITY_LISTING = "entity-listing"
    STRUCTURED_QUERY = "structured-query"
    AMBIENT_QUERY = "ambient-query"

    @classmethod
    def coerce(cls, value: HandlerType | str | None) -> HandlerType:
        """Accept enum members, their values and host-specific aliases."""
        if isinstance(value, HandlerType):
            return value
        if value in _ALIASES:
            return _ALIASES[value]
        return cls(value or cls.STRUCTURED_DATA.value)


_ALIASES: dict[str, HandlerType] = {
    "wp-query": HandlerType.STRUCTURED_QUERY,
    "main-query": HandlerType.AMBIENT_QUERY,
    "wp-main-query": HandlerType.AMBIENT_QUERY,
    "wp-users": HandlerType.ENTITY_LISTING,
    "wp-terms": HandlerType.ENTITY_LISTING,
}


@dataclass(frozen=True, slots=True)
class LoopPreset:
    """Loop configuration registered under ``id`` (and optionally ``key``).

    ``config`` holds handler input: ``args`` for query handlers, ``data``
    for structured data. Values may reference parameters as ``$name`` or
    ``$name ?? default``.
    """

    id: str
    handler_type: HandlerType = HandlerType.STRUCTURED_DATA
    config: Mapping[str, Any] = field(default_factory=dict)
    key: str = ""
    name: str = ""

    @property
    def args(self) -> Mapping[str, Any]:
        args = self.config.get("args")
        return args if isinstance(args, Mapping) else {}

    @classmethod
    def from_dict(cls, loop_id: str, data: Mapping[str, Any] | LoopPreset) -> LoopPreset:
        """Build a preset from ``{"name", "key", "config": {"type", ...}}``.

        Raises:
            ValueError: If ``config.type`` is not a known handler type
        """
        if isinstance(data, LoopPreset):
            return data
        config = data.get("config")
        config = dict(config) if isinstance(config, Mapping) else {}
        handler = config.pop("type", data.get("type"))
        return cls(
            id=str(loop_id),
            handler_type=HandlerType.coerce(handler),
            config=config,
            key=str(data.get("key") or ""),
            name=str(data.get("name") or ""),
        )
