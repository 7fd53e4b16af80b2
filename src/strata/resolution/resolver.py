"""Resolve parsed expressions against an ordered source list.

Sources are ``(key, source)`` pairs, oldest first. The *last* pair whose key
matches the expression root is the base value; later pushes shadow earlier
ones. The path is then walked segment by segment and call segments are
applied as modifiers, left to right.

Resolution never raises for content problems:

- unknown root or missing path segment -> ``None``
- unknown modifier -> value unchanged
- modifier that fails on its input -> value unchanged
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from strata.expression.literals import infer_literal
from strata.expression.nodes import Call, Expression
from strata.expression.parser import parse_expression
from strata.resolution.modifiers import DEFAULT_MODIFIERS, Modifier
from strata.resolution.values import LoopRef, is_sequence, unwrap

if TYPE_CHECKING:
    from strata.context.entry import SourcePair

logger = logging.getLogger(__name__)

MISSING = object()  # lookup miss sentinel

# Failures a modifier may raise on unexpected input
_MODIFIER_ERRORS = (TypeError, ValueError, KeyError, IndexError, ZeroDivisionError, OverflowError)


def find_source(root: str, sources: Sequence[SourcePair]) -> Any:
    """Source registered last under ``root``, or the ``MISSING`` sentinel."""
    for pair in reversed(sources):
        if pair.key == root:
            return pair.source
    return MISSING


def _is_index(name: str) -> bool:
    return name.isascii() and name.isdecimal()


def lookup(value: Any, name: str) -> Any:
    """One path step: mapping key, sequence index or public attribute."""
    if isinstance(value, Mapping):
        if name in value:
            return value[name]
        if _is_index(name) and int(name) in value:
            return value[int(name)]
        return MISSING
    if is_sequence(value):
        if _is_index(name) and int(name) < len(value):
            return value[int(name)]
        return MISSING
    if value is None or isinstance(value, (str, int, float, bool)) or name.startswith("_"):
        return MISSING
    return getattr(value, name, MISSING)


def resolve_argument(source: str, sources: Sequence[SourcePair], modifiers: Mapping[str, Modifier]) -> Any:
    """Evaluate a call argument: literal first, then a nested expression."""
    literal = infer_literal(source)
    if literal.resolved:
        return literal.value
    return resolve(source, sources, modifiers=modifiers)


def apply_modifier(
    value: Any,
    call: Call,
    sources: Sequence[SourcePair],
    modifiers: Mapping[str, Modifier] | None = None,
) -> Any:
    """Apply one modifier call; unknown names and failures leave ``value`` as is."""
    registry = DEFAULT_MODIFIERS if modifiers is None else modifiers
    func = registry.get(call.name)
    if func is None:
        logger.debug(f"Unknown modifier '{call.name}', value left unchanged")
        return value

    args = [resolve_argument(a.source, sources, registry) for a in call.positional]
    kwargs = {
        a.keyword.lstrip("$"): resolve_argument(a.source, sources, registry)
        for a in call.keywords
        if a.keyword
    }
    try:
        if getattr(func, "pass_sources", False):
            return func(sources, registry, value, *args, **kwargs)
        return func(value, *args, **kwargs)
    except _MODIFIER_ERRORS as e:
        logger.debug(f"Modifier '{call.name}' failed on {type(value).__name__}: {e}")
        return value


def resolve(
    expression: Expression | str,
    sources: Sequence[SourcePair],
    *,
    keep_loop_ref: bool = False,
    modifiers: Mapping[str, Modifier] | None = None,
) -> Any:
    """Resolve ``expression`` against ``sources``.

    Args:
        expression: Parsed expression or expression text (braces optional)
        sources: Source pairs, oldest first
        keep_loop_ref: Return a final loop reference as-is instead of its data
        modifiers: Modifier registry (built-ins when omitted)

    Returns:
        Resolved value, or None when the root or a path segment is missing

    Example:
        >>> resolve("item.title.toUppercase()", [SourcePair("item", {"title": "hi"})])
        'HI'
    """
    expr = parse_expression(expression) if isinstance(expression, str) else expression
    if not expr or expr.root_call is not None:
        return None

    value = find_source(expr.root, sources)
    if value is MISSING:
        logger.debug(f"No source for root '{expr.root}' in '{expr.source}'")
        return None

    for segment in expr.segments[1:]:
        value = unwrap(value)
        if isinstance(segment, Call):
            value = apply_modifier(value, segment, sources, modifiers)
            continue
        value = lookup(value, segment.name)
        if value is MISSING:
            logger.debug(f"Path segment '{segment.name}' missing in '{expr.source}'")
            return None

    if keep_loop_ref:
        return LoopRef.from_value(value) or value
    return unwrap(value)
