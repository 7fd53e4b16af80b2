"""Dynamic content processing on top of the resolver.

``apply`` is the entry point renderers use for attribute values:

- a standalone ``{expr}`` string yields the raw resolved value
- any other string gets every embedded ``{expr}`` substituted as text
- mappings and sequences are processed recursively
- empty values are returned untouched
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from strata.expression.literals import infer_literal
from strata.expression.templates import find_and_replace, is_standalone_expression
from strata.resolution.modifiers import Modifier
from strata.resolution.resolver import resolve
from strata.resolution.values import is_sequence, to_display_string

if TYPE_CHECKING:
    from strata.context.entry import SourcePair

__all__ = ["apply", "process_expression", "replace_templates", "to_display_string"]


def process_expression(
    expression: str,
    sources: Sequence[SourcePair],
    modifiers: Mapping[str, Modifier] | None = None,
) -> Any:
    """Evaluate expression text (no braces): literal first, then the sources."""
    literal = infer_literal(expression)
    if literal.resolved:
        return literal.value
    return resolve(expression, sources, modifiers=modifiers)


def replace_templates(
    text: str,
    sources: Sequence[SourcePair],
    modifiers: Mapping[str, Modifier] | None = None,
) -> str:
    """Substitute every ``{expr}`` in ``text`` with its display string."""
    return find_and_replace(
        text,
        lambda expression: to_display_string(process_expression(expression, sources, modifiers)),
    )


def apply(
    value: Any,
    sources: Sequence[SourcePair],
    modifiers: Mapping[str, Modifier] | None = None,
) -> Any:
    """Resolve dynamic content inside ``value``."""
    if not value:
        return value
    if isinstance(value, str):
        if is_standalone_expression(value):
            return process_expression(value[1:-1], sources, modifiers)
        return replace_templates(value, sources, modifiers)
    if isinstance(value, Mapping):
        return {k: apply(v, sources, modifiers) for k, v in value.items()}
    if is_sequence(value):
        return [apply(v, sources, modifiers) for v in value]
    return value
