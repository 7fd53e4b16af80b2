"""Value helpers shared by the resolver, modifiers and renderers."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class LoopRef:
    """Reference to a whole loop result forwarded through a prop.

    Path traversal and modifiers see ``data``; the loop renderer can ask for
    the ref itself to recover the preset ``key``.
    """

    key: str
    data: Sequence[Any] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"prop-type": "loop", "key": self.key, "data": list(self.data)}

    @classmethod
    def from_value(cls, value: Any) -> LoopRef | None:
        """Recognize ``{"prop-type": "loop", ...}`` mappings as loop refs."""
        if isinstance(value, LoopRef):
            return value
        if isinstance(value, Mapping) and value.get("prop-type") == "loop":
            data = value.get("data")
            return cls(str(value.get("key") or ""), list(data) if is_sequence(data) else [])
        return None


def unwrap(value: Any) -> Any:
    """Unwrap a loop reference to its data; other values pass through."""
    ref = LoopRef.from_value(value)
    return list(ref.data) if ref is not None else value


def is_sequence(value: Any) -> bool:
    """True for list-like values (not strings, bytes or mappings)."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_empty(value: Any) -> bool:
    """Emptiness the way content authors expect it: ``0`` and ``False`` count."""
    if value is None:
        return True
    if isinstance(value, (str, Sequence, Mapping)):
        return len(value) == 0
    return not value


def to_display_string(value: Any) -> str:
    """String form used when a value is substituted into text.

    ``None`` is empty, booleans are ``true``/``false``, sequences are joined
    with ``", "`` and mappings are JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    ref = LoopRef.from_value(value)
    if ref is not None:
        value = list(ref.data)
    if is_sequence(value):
        return ", ".join(to_display_string(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)
