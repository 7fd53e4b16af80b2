"""Loop parameter binding.

Preset configs reference parameters as ``$name`` or ``$name ?? default``::

    {"posts_per_page": "$count ?? 2", "offset": "$count ?? 1"}

Defaults are collected before binding. When one parameter carries several
defaults, the first one found is used everywhere: with no ``$count``
supplied, both values above bind to ``2``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from strata.resolution.values import is_sequence

DEFAULT_PARAM_RE = re.compile(r"(\$\w+)\s*\?\?\s*(-?\d+(?:\.\d+)?|true|false|'[^']*')")
_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?\d+\.\d+$")


def parse_default_value(text: str) -> Any:
    """Type a default literal: int, float, bool, or a quoted string."""
    text = text.strip()
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    if text == "true":
        return True
    if text == "false":
        return False
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text


def extract_default_params(value: Any, defaults: dict[str, Any] | None = None) -> dict[str, Any]:
    """Collect ``$name ?? default`` defaults from a config, first one wins."""
    if defaults is None:
        defaults = {}
    if isinstance(value, str):
        for match in DEFAULT_PARAM_RE.finditer(value):
            name, raw = match.group(1), match.group(2)
            if name not in defaults:
                defaults[name] = parse_default_value(raw)
    elif isinstance(value, Mapping):
        for item in value.values():
            extract_default_params(item, defaults)
    elif is_sequence(value):
        for item in value:
            extract_default_params(item, defaults)
    return defaults


def _scalar_text(value: Any) -> str:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def _replacement_text(value: Any) -> str:
    if value is None or value == "":
        return ""
    if isinstance(value, Mapping) or is_sequence(value):
        return json.dumps(value, default=str)
    return _scalar_text(value)


def bind_params(value: Any, params: Mapping[str, Any]) -> Any:
    """Substitute parameters into a config value, recursively.

    1. every ``$name ?? default`` is replaced with the bound value's text
    2. a string that is exactly ``$name`` becomes the bound value itself
       (type preserved)
    3. remaining ``$name`` references are replaced longest name first;
       lists and mappings are JSON-encoded
    """
    if isinstance(value, str):
        result = DEFAULT_PARAM_RE.sub(
            lambda m: _scalar_text(params.get(m.group(1))),
            value,
        )
        if result in params:
            return params[result]
        for name in sorted(params, key=len, reverse=True):
            if name in result:
                result = result.replace(name, _replacement_text(params[name]))
        return result
    if isinstance(value, Mapping):
        return {k: bind_params(v, params) for k, v in value.items()}
    if is_sequence(value):
        return [bind_params(v, params) for v in value]
    return value


def merge_params(config: Any, params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Defaults from ``config`` overridden by ``params``."""
    merged = extract_default_params(config)
    merged.update(params or {})
    return merged


def strip_loop_params(loop_id: str) -> str:
    """Drop an inline argument list: ``posts($count: 2)`` -> ``posts``."""
    loop_id = loop_id.strip()
    paren = loop_id.find("(")
    return loop_id[:paren].strip() if paren != -1 else loop_id
