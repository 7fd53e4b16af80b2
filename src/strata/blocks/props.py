"""Component property resolution.

Defaults come from the pattern's prop definitions; instance attributes
override them. Both are resolved against the *caller's* sources, before
the component's isolated frame is pushed.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from strata.expression.templates import is_standalone_expression
from strata.resolution.modifiers import Modifier, to_bool, to_number
from strata.resolution.processor import apply, process_expression
from strata.resolution.values import LoopRef, is_sequence, to_display_string

if TYPE_CHECKING:
    from strata.cache.patterns import PropDefinition
    from strata.context.entry import SourcePair
    from strata.loops.service import LoopService

# Defaults that reference other props cannot be resolved before props exist
_SELF_REFERENCE = "{props."


def empty_value(primitive: str) -> Any:
    if primitive == "number":
        return 0
    if primitive == "boolean":
        return False
    if primitive == "array":
        return []
    if primitive == "object":
        return {}
    return ""


def to_string(value: Any) -> str:
    return to_display_string(value)


def to_array(value: Any) -> Any:
    """Sequences and mappings as-is; JSON text decoded; else comma-split."""
    if is_sequence(value):
        return list(value)
    if isinstance(value, Mapping):
        return dict(value)
    text = to_display_string(value).strip()
    if not text:
        return []
    if text[0] in "[{":
        try:
            decoded = json.loads(text)
        except ValueError:
            pass
        else:
            if isinstance(decoded, (list, dict)):
                return decoded
    return [part.strip() for part in text.split(",") if part.strip()]


def cast_to_type(value: Any, primitive: str) -> Any:
    if value is None or value == "":
        return empty_value(primitive)
    if primitive == "string":
        return to_string(value)
    if primitive == "number":
        return to_number(value)
    if primitive == "boolean":
        return to_bool(value)
    if primitive in ("array", "object"):
        return to_array(value)
    return value


def _strip_braces(text: str) -> str:
    text = text.strip()
    return text[1:-1] if is_standalone_expression(text) else text


def resolve_loop_key(
    value: Any,
    sources: Sequence[SourcePair],
    modifiers: Mapping[str, Modifier] | None = None,
) -> str:
    """Preset key a loop prop points at.

    Only ``props.*`` expressions are resolved here; anything else is kept
    as text for the loop renderer to resolve in its own scope.
    """
    if is_sequence(value) or isinstance(value, Mapping):
        return ""
    expression = _strip_braces(to_display_string(value))
    if not expression:
        return ""
    if sources and "props." in expression:
        resolved = process_expression(expression, sources, modifiers)
        if isinstance(resolved, str) and resolved:
            return resolved
    return expression


def resolve_loop_data(
    value: Any,
    sources: Sequence[SourcePair],
    loops: LoopService | None = None,
    modifiers: Mapping[str, Modifier] | None = None,
) -> list[Any]:
    """Materialized items for a loop prop value."""
    if is_sequence(value):
        return list(value)
    if isinstance(value, Mapping):
        return [value]
    expression = _strip_braces(to_display_string(value))
    if not expression:
        return []
    if loops is not None and loops.is_valid_loop_id(expression):
        return loops.get_loop_data(expression)
    if sources:
        resolved = process_expression(expression, sources, modifiers)
        if is_sequence(resolved):
            return list(resolved)
    result = to_array(expression)
    return result if isinstance(result, list) else [result]


def loop_property_value(
    value: Any,
    sources: Sequence[SourcePair],
    loops: LoopService | None = None,
    modifiers: Mapping[str, Modifier] | None = None,
) -> LoopRef:
    ref = LoopRef.from_value(value)
    if ref is not None:
        return ref
    return LoopRef(
        key=resolve_loop_key(value, sources, modifiers),
        data=resolve_loop_data(value, sources, loops, modifiers),
    )


def resolve_properties(
    definitions: Sequence[PropDefinition],
    instance_attributes: Mapping[str, Any],
    sources: Sequence[SourcePair],
    loops: LoopService | None = None,
    modifiers: Mapping[str, Modifier] | None = None,
) -> dict[str, Any]:
    """Resolve component props from defaults and instance attributes.

    - a default containing ``{props.`` becomes the empty value of its type
    - string defaults are resolved against ``sources``
    - loop props (``specialized: array``) become :class:`LoopRef` values
    - instance attributes override defaults; ``None`` means not provided
    - attributes without a definition are ignored
    """
    by_key = {definition.key: definition for definition in definitions}
    props: dict[str, Any] = {}

    for key, definition in by_key.items():
        default = definition.default
        if isinstance(default, str) and _SELF_REFERENCE in default:
            props[key] = empty_value(definition.primitive)
            continue
        if sources and isinstance(default, str):
            default = apply(default, sources, modifiers)
        if definition.is_loop:
            props[key] = loop_property_value(default, sources, loops, modifiers)
        else:
            props[key] = cast_to_type(default, definition.primitive)

    for key, value in instance_attributes.items():
        definition = by_key.get(key)
        if definition is None or value is None:
            continue
        if definition.is_loop:
            props[key] = loop_property_value(value, sources, loops, modifiers)
        else:
            props[key] = cast_to_type(value, definition.primitive)

    return props
