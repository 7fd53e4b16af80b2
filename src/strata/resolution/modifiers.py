"""Built-in modifiers for Strata expressions.

Modifiers are named calls chained after a path:
``{item.title.toUppercase()}`` or ``{props.items.slice(1, 3).join(' / ')}``.
Each one is a plain function ``(value, *args, **kwargs) -> value``.

Categories:
**String**:
    - `toUppercase` / `toUpperCase`, `toLowercase` / `toLowerCase`
    - `trim(chars?)`, `truncate(length, suffix?)`, `split(sep?)`
    - `stripTags`, `urlEncode`, `concat(*others)`

**Conversion**:
    - `toInt`: leading number or ``0`` (``"abc".toInt()`` is ``0``)
    - `toNumber`, `toString`, `toBool`, `toJson`

**Sequence**:
    - `length`, `at(n)`, `slice(start, end?)`, `first`, `last`, `reverse`
    - `join(sep?)`, `includes(item)`, `filter(key, value?)`, `pluck(key)`

**Number**:
    - `round(precision?)`, `ceil`, `floor`, `abs`

**Other**:
    - `format(fmt)`: PHP-style date tokens for dates, format spec for numbers
    - `default(fallback)`: fallback for empty values
    - `applyData`: resolve ``{...}`` placeholders inside the value

Custom Modifiers:
    >>> env.add_modifier("double", lambda v: v * 2)
    >>> # {props.count.double()}

"""

from __future__ import annotations

import html
import json
import math
import re
from collections.abc import Callable, Mapping
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from strata.expression.literals import parse_number
from strata.resolution.values import is_sequence, to_display_string

if TYPE_CHECKING:
    from strata.environment.core import Environment

Modifier = Callable[..., Any]

_LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?)")
_TAG_RE = re.compile(r"<[^>]*>")
_MISSING = object()


class ModifierRegistry:
    """Dict-like view of an environment's modifiers.

    Supports:
        - env.modifiers['name'] = func
        - env.modifiers.update({'name': func})
        - func = env.modifiers['name']
        - 'name' in env.modifiers

    All mutations use copy-on-write for thread-safety.
    """

    __slots__ = ("_env", "_attr")

    def __init__(self, env: Environment, attr: str):
        self._env = env
        self._attr = attr

    def _get_dict(self) -> dict[str, Modifier]:
        return getattr(self._env, self._attr)

    def _set_dict(self, d: dict[str, Modifier]) -> None:
        setattr(self._env, self._attr, d)

    def __getitem__(self, name: str) -> Modifier:
        return self._get_dict()[name]

    def __setitem__(self, name: str, func: Modifier) -> None:
        new = self._get_dict().copy()
        new[name] = func
        self._set_dict(new)

    def __contains__(self, name: object) -> bool:
        return name in self._get_dict()

    def __len__(self) -> int:
        return len(self._get_dict())

    def get(self, name: str, default: Modifier | None = None) -> Modifier | None:
        return self._get_dict().get(name, default)

    def update(self, mapping: Mapping[str, Modifier]) -> None:
        """Batch update modifiers."""
        new = self._get_dict().copy()
        new.update(mapping)
        self._set_dict(new)

    def copy(self) -> dict[str, Modifier]:
        """Return a copy of the underlying dict."""
        return self._get_dict().copy()

    def keys(self):
        return self._get_dict().keys()

    def items(self):
        return self._get_dict().items()


def pass_sources(func: Modifier) -> Modifier:
    """Mark a modifier as needing the active source list.

    The resolver then calls it as ``func(sources, modifiers, value, *args)``,
    where ``modifiers`` is the registry the expression is resolved with.
    """
    func.pass_sources = True  # type: ignore[attr-defined]
    return func


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def to_int(value: Any) -> int:
    """Leading integer part of ``value``; ``0`` when there is none."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_NUMBER_RE.match(to_display_string(value))
    if match is None:
        return 0
    number = float(match.group(1))
    return int(number) if math.isfinite(number) else 0


def to_number(value: Any) -> int | float:
    """``value`` as int or float; ``0`` when it is not numeric."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    number = parse_number(to_display_string(value))
    return 0 if number is None else number


def to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


def to_json(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False)


# ---------------------------------------------------------------------------
# String
# ---------------------------------------------------------------------------


def _upper(value: Any) -> str:
    return to_display_string(value).upper()


def _lower(value: Any) -> str:
    return to_display_string(value).lower()


def _trim(value: Any, chars: str | None = None) -> str:
    return to_display_string(value).strip(chars)


def _truncate(value: Any, length: Any = 100, suffix: str = "...") -> str:
    text = to_display_string(value)
    limit = to_int(length)
    if limit < 0 or len(text) <= limit:
        return text
    return text[:limit].rstrip() + suffix


def _split(value: Any, sep: str = ",") -> list[str]:
    text = to_display_string(value)
    if text == "":
        return []
    return [part.strip() for part in text.split(sep)] if sep else list(text)


def _strip_tags(value: Any) -> str:
    return html.unescape(_TAG_RE.sub("", to_display_string(value)))


def _url_encode(value: Any) -> str:
    return quote(to_display_string(value), safe="")


def _concat(value: Any, *others: Any) -> Any:
    if is_sequence(value):
        result = list(value)
        for other in others:
            if is_sequence(other):
                result.extend(other)
            else:
                result.append(other)
        return result
    return to_display_string(value) + "".join(to_display_string(o) for o in others)


# ---------------------------------------------------------------------------
# Sequence
# ---------------------------------------------------------------------------


def _length(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, (str, Mapping)) or is_sequence(value):
        return len(value)
    return len(to_display_string(value))


def _at(value: Any, index: Any) -> Any:
    if not (is_sequence(value) or isinstance(value, str)):
        return None
    i = to_int(index)
    if -len(value) <= i < len(value):
        return value[i]
    return None


def _slice(value: Any, start: Any = 0, end: Any = None) -> Any:
    if not (is_sequence(value) or isinstance(value, str)):
        return value
    stop = None if end is None else to_int(end)
    result = value[to_int(start) : stop]
    return result if isinstance(result, str) else list(result)


def _first(value: Any) -> Any:
    return _at(value, 0)


def _last(value: Any) -> Any:
    return _at(value, -1)


def _reverse(value: Any) -> Any:
    if isinstance(value, str):
        return value[::-1]
    if is_sequence(value):
        return list(reversed(value))
    return value


def _join(value: Any, sep: str = ", ") -> str:
    if not is_sequence(value):
        return to_display_string(value)
    return to_display_string(sep).join(to_display_string(item) for item in value)


def _includes(value: Any, needle: Any) -> bool:
    if isinstance(value, str):
        return to_display_string(needle) in value
    if isinstance(value, Mapping):
        return needle in value.values()
    if is_sequence(value):
        return needle in value
    return False


def _item_get(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None) if not key.startswith("_") else None


def _filter(value: Any, key: Any, expected: Any = _MISSING) -> Any:
    """Items whose ``key`` equals ``expected`` (or is truthy when omitted)."""
    if not is_sequence(value):
        return value
    name = to_display_string(key)
    if expected is _MISSING:
        return [item for item in value if _item_get(item, name)]
    return [item for item in value if _item_get(item, name) == expected]


def _pluck(value: Any, key: Any) -> Any:
    if not is_sequence(value):
        return _item_get(value, to_display_string(key))
    name = to_display_string(key)
    return [_item_get(item, name) for item in value]


def _default(value: Any, fallback: Any = "") -> Any:
    if value is None or value == "" or (is_sequence(value) and len(value) == 0):
        return fallback
    return value


# ---------------------------------------------------------------------------
# Number
# ---------------------------------------------------------------------------


def _finite_number(value: Any) -> int | float:
    number = to_number(value)
    return number if math.isfinite(number) else 0


def _round(value: Any, precision: Any = 0) -> int | float:
    digits = to_int(precision)
    result = round(_finite_number(value), digits)
    return int(result) if digits <= 0 else result


def _ceil(value: Any) -> int:
    return math.ceil(_finite_number(value))


def _floor(value: Any) -> int:
    return math.floor(_finite_number(value))


def _abs(value: Any) -> int | float:
    return abs(to_number(value))


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def _from_timestamp(seconds: float) -> datetime | None:
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _coerce_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _from_timestamp(value)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        number = parse_number(text)
        if number is not None:
            return _from_timestamp(number)
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


_DATE_TOKENS: dict[str, Callable[[datetime], str]] = {
    "Y": lambda d: f"{d.year:04d}",
    "y": lambda d: f"{d.year % 100:02d}",
    "m": lambda d: f"{d.month:02d}",
    "n": lambda d: str(d.month),
    "d": lambda d: f"{d.day:02d}",
    "j": lambda d: str(d.day),
    "H": lambda d: f"{d.hour:02d}",
    "G": lambda d: str(d.hour),
    "h": lambda d: f"{(d.hour % 12) or 12:02d}",
    "g": lambda d: str((d.hour % 12) or 12),
    "i": lambda d: f"{d.minute:02d}",
    "s": lambda d: f"{d.second:02d}",
    "A": lambda d: "AM" if d.hour < 12 else "PM",
    "a": lambda d: "am" if d.hour < 12 else "pm",
    "D": lambda d: d.strftime("%a"),
    "l": lambda d: d.strftime("%A"),
    "M": lambda d: d.strftime("%b"),
    "F": lambda d: d.strftime("%B"),
    "U": lambda d: str(int(d.timestamp())),
}


def format_date(moment: datetime, fmt: str) -> str:
    """Format ``moment`` with PHP ``date()`` tokens; ``\\`` escapes a char."""
    out: list[str] = []
    escaped = False
    for char in fmt:
        if escaped:
            out.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in _DATE_TOKENS:
            out.append(_DATE_TOKENS[char](moment))
        else:
            out.append(char)
    return "".join(out)


def _format(value: Any, fmt: Any = "") -> Any:
    fmt = to_display_string(fmt)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if fmt.strip().isdigit():
            return f"{value:.{int(fmt)}f}"
        try:
            return format(value, fmt)
        except ValueError:
            pass
    moment = _coerce_datetime(value)
    if moment is None:
        return value
    return format_date(moment, fmt or "Y-m-d")


@pass_sources
def _apply_data(sources: Any, modifiers: Mapping[str, Modifier], value: Any) -> Any:
    from strata.resolution.processor import apply

    return apply(value, sources, modifiers)


DEFAULT_MODIFIERS: dict[str, Modifier] = {
    # String
    "toUppercase": _upper,
    "toUpperCase": _upper,
    "toLowercase": _lower,
    "toLowerCase": _lower,
    "trim": _trim,
    "truncate": _truncate,
    "split": _split,
    "stripTags": _strip_tags,
    "urlEncode": _url_encode,
    "concat": _concat,
    # Conversion
    "toInt": to_int,
    "toNumber": to_number,
    "toString": to_display_string,
    "toBool": to_bool,
    "toJson": to_json,
    # Sequence
    "length": _length,
    "at": _at,
    "slice": _slice,
    "first": _first,
    "last": _last,
    "reverse": _reverse,
    "join": _join,
    "includes": _includes,
    "filter": _filter,
    "pluck": _pluck,
    # Number
    "round": _round,
    "ceil": _ceil,
    "floor": _floor,
    "abs": _abs,
    # Other
    "format": _format,
    "default": _default,
    "applyData": _apply_data,
}
