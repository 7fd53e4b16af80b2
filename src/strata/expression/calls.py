"""Call-segment parsing: ``name(arg, arg, ...)``.

- ``is_call`` recognizes segments like ``format("Y-m-d")`` or ``toInt()``
- ``parse_call`` splits a call into its name and raw argument text
- ``split_args`` splits on commas only at depth 0 and outside quoted strings
- ``parse_argument`` detects ``$name: value`` keyword arguments
"""

from __future__ import annotations

import re
from functools import lru_cache

from strata.expression.nodes import Argument

_CALL_RE = re.compile(r"^\w+\(.*\)$", re.DOTALL)
_KEYWORD_RE = re.compile(r"^(\$?[A-Za-z_][\w-]*)\s*:(?!:)")

_OPENERS = "([{"
_CLOSERS = ")]}"


def is_call(part: str) -> bool:
    """Check if a path part is a call segment."""
    return _CALL_RE.match(part) is not None


@lru_cache(maxsize=1024)
def parse_call(part: str) -> tuple[str, str]:
    """Parse ``name(args)`` into ``(name, raw_args)``.

    Returns ``("", "")`` when ``part`` is not a call.
    """
    part = part.strip()
    if not is_call(part):
        return "", ""
    name, _, args = part[:-1].partition("(")
    return name, args


@lru_cache(maxsize=1024)
def split_args(arg_string: str) -> tuple[str, ...]:
    """Split a raw argument list on top-level commas.

    Example:
        >>> split_args("1, 'a, b', props.at(0, 2)")
        ('1', "'a, b'", 'props.at(0, 2)')
    """
    if not arg_string.strip():
        return ()

    args: list[str] = []
    current: list[str] = []
    depth = 0
    quote: str | None = None
    prev = ""

    for char in arg_string:
        if char in "\"'" and prev != "\\":
            if quote is None:
                quote = char
            elif char == quote:
                quote = None

        if quote is None:
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth = max(0, depth - 1)
            elif char == "," and depth == 0:
                trimmed = "".join(current).strip()
                if trimmed:
                    args.append(trimmed)
                current = []
                prev = char
                continue

        current.append(char)
        prev = char

    trimmed = "".join(current).strip()
    if trimmed:
        args.append(trimmed)
    return tuple(args)


def parse_argument(raw: str) -> Argument:
    """Parse one raw argument, detecting ``$name: value`` keywords.

    Keyword names are normalized to carry a leading ``$``.
    """
    raw = raw.strip()
    match = _KEYWORD_RE.match(raw)
    if match is None:
        return Argument(raw)
    keyword = match.group(1)
    if not keyword.startswith("$"):
        keyword = "$" + keyword
    return Argument(raw[match.end() :].strip(), keyword=keyword)
