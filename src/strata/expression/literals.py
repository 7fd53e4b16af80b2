"""Literal inference for expression strings.

Quoted strings, numbers, booleans and JSON arrays/objects are literals and
never hit the source list::

    >>> infer_literal("'hello'")
    Literal(resolved=True, value='hello')
    >>> infer_literal("3")
    Literal(resolved=True, value=3)
    >>> infer_literal("item.title")
    Literal(resolved=False, value=None)
"""

from __future__ import annotations

import json
import re
from typing import Any, NamedTuple

_QUOTED_RE = re.compile(r"""^(["'])(.*)\1$""", re.DOTALL)
_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class Literal(NamedTuple):
    """Result of literal inference."""

    resolved: bool
    value: Any


UNRESOLVED = Literal(False, None)


def parse_number(text: str) -> int | float | None:
    """Parse a numeric string: int unless it contains a ``.``.

    Returns None when ``text`` is not numeric.
    """
    text = text.strip()
    if not _NUMERIC_RE.match(text):
        return None
    if "." in text:
        return float(text)
    if "e" in text or "E" in text:
        number = float(text)
        return int(number) if number.is_integer() else number
    return int(text)


def infer_literal(expression: str) -> Literal:
    """Infer a literal value from an expression string."""
    expression = expression.strip()

    if expression == "":
        return Literal(True, "")

    match = _QUOTED_RE.match(expression)
    if match:
        return Literal(True, match.group(2))

    number = parse_number(expression)
    if number is not None:
        return Literal(True, number)

    lowered = expression.lower()
    if lowered == "true":
        return Literal(True, True)
    if lowered == "false":
        return Literal(True, False)

    if (expression[0], expression[-1]) in (("[", "]"), ("{", "}")):
        try:
            return Literal(True, json.loads(expression))
        except ValueError:
            pass

    return UNRESOLVED
