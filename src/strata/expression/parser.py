"""Expression parser.

Turns expression text into an :class:`~strata.expression.nodes.Expression`.
Surrounding braces are optional, so ``{item.title}`` and ``item.title``
parse identically. Call arguments stay as text and are resolved lazily.
"""

from __future__ import annotations

from functools import lru_cache

from strata.expression.calls import parse_argument, parse_call, split_args
from strata.expression.nodes import Call, Expression, Key, Segment
from strata.expression.path import split_path
from strata.expression.templates import is_standalone_expression


def _parse_segment(part: str) -> Segment:
    name, raw_args = parse_call(part)
    if not name:
        return Key(part)
    return Call(name, tuple(parse_argument(arg) for arg in split_args(raw_args)))


@lru_cache(maxsize=1024)
def parse_expression(source: str) -> Expression:
    """Parse ``source`` into an Expression (memoized).

    Example:
        >>> expr = parse_expression("item.title.toUppercase()")
        >>> expr.root, expr.path, [m.name for m in expr.modifiers]
        ('item', ('title',), ['toUppercase'])
    """
    text = source.strip()
    if is_standalone_expression(text):
        text = text[1:-1].strip()
    return Expression(source, tuple(_parse_segment(part) for part in split_path(text)))
