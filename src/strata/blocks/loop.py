"""Loop renderer.

A loop block picks its items one of two ways:

- ``loopId`` (+ ``loopParams``): a preset by id or key; ``target`` then
  only contributes trailing modifiers, e.g. ``.slice(0, 3)``
- ``target`` alone: an inline JSON array/object, a preset call such as
  ``posts($count: 2).slice(1)``, or an expression such as
  ``props.loop($count: props.count)`` or ``item.children``

Each item is pushed as a local entry under ``itemId`` (default ``item``),
together with its 0-based index under ``indexId`` when one is declared.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from strata.context.entry import DynamicContentEntry, EntryKind
from strata.expression.nodes import Call
from strata.expression.parser import parse_expression
from strata.expression.templates import is_standalone_expression
from strata.loops.params import strip_loop_params
from strata.resolution.resolver import MISSING, apply_modifier, lookup
from strata.resolution.values import LoopRef, is_sequence

if TYPE_CHECKING:
    from strata.blocks.base import Block
    from strata.context.entry import SourcePair
    from strata.render_session import RenderSession

logger = logging.getLogger(__name__)


def bind_value(raw: str, sources: list[SourcePair], session: RenderSession) -> tuple[bool, Any]:
    """Evaluate a loop parameter value.

    Returns ``(keep, value)``: an unresolvable expression keeps its raw text,
    an empty result drops the parameter.
    """
    value = session.evaluate(raw, sources)
    if value is None:
        return True, raw
    if value == "":
        return False, None
    return True, value


def resolve_loop_params(
    params: Mapping[str, Any] | None,
    sources: list[SourcePair],
    session: RenderSession,
) -> dict[str, Any]:
    """Resolve ``loopParams`` values against the loop's sources.

    Names are normalized to their ``$name`` form.
    """
    if not params:
        return {}
    resolved: dict[str, Any] = {}
    for key, value in params.items():
        if not isinstance(key, str) or not key.strip("$"):
            continue
        key = key if key.startswith("$") else f"${key}"
        if isinstance(value, str):
            keep, value = bind_value(value, sources, session)
            if not keep:
                continue
        resolved[key] = value
    return resolved


def keyword_args(call: Call, sources: list[SourcePair], session: RenderSession) -> dict[str, Any]:
    """``$name: value`` arguments of a loop call; positional ones are ignored."""
    params: dict[str, Any] = {}
    for argument in call.keywords:
        if not argument.keyword or argument.keyword == "$":
            continue
        keep, value = bind_value(argument.source, sources, session)
        if keep:
            params[argument.keyword] = value
    return params


def as_items(value: Any) -> list[Any]:
    if isinstance(value, Mapping):
        return [value]
    if is_sequence(value):
        return list(value)
    return []


def apply_target_modifiers(items: list[Any], target: str, sources: list[SourcePair], session: RenderSession) -> list[Any]:
    """Apply the call segments of ``target`` to already loaded items."""
    current: Any = items
    for segment in parse_expression(target).segments:
        if isinstance(segment, Call):
            current = apply_modifier(current, segment, sources, session.modifiers)
    return list(current) if is_sequence(current) else items


def _load_preset(name: str, params: dict[str, Any], session: RenderSession) -> list[Any]:
    return session.loops.get_loop_data(name, params)


def _from_loop_ref(ref: LoopRef, params: dict[str, Any], sources: list[SourcePair], session: RenderSession) -> Any:
    if ref.key and session.loops.is_valid_loop_id(ref.key):
        return _load_preset(ref.key, params, session)
    if ref.key:
        resolved = session.resolve(ref.key, sources)
        if is_sequence(resolved) or isinstance(resolved, Mapping):
            return resolved
    return list(ref.data)


def parse_loop_target(target: str, sources: list[SourcePair], session: RenderSession) -> list[Any]:
    """Items for a ``target`` expression (see module docstring)."""
    target = target.strip()
    if not target:
        return []

    if (target[0], target[-1]) in (("[", "]"), ("{", "}")):
        try:
            return as_items(json.loads(target))
        except ValueError:
            if not is_standalone_expression(target):
                return []
            target = target[1:-1].strip()

    current: Any = MISSING
    loaded = False

    for segment in parse_expression(target).segments:
        if loaded:
            if isinstance(segment, Call):
                current = apply_modifier(current, segment, sources, session.modifiers)
            else:
                current = lookup(current, segment.name)
            if current is MISSING or current is None:
                return []
            continue

        name = segment.name
        params = keyword_args(segment, sources, session) if isinstance(segment, Call) else {}

        if current is MISSING:
            if session.loops.is_valid_loop_id(name):
                current = _load_preset(name, params, session)
                loaded = True
                continue
            current = session.resolve(name, sources, keep_loop_ref=True)
        else:
            current = lookup(current, name)
            if current is MISSING:
                current = None

        ref = LoopRef.from_value(current)
        if ref is not None:
            current = _from_loop_ref(ref, params, sources, session)
            loaded = is_sequence(current)
        elif isinstance(current, str) and current:
            if session.loops.is_valid_loop_id(current):
                current = _load_preset(current, params, session)
                loaded = True
            else:
                resolved = session.resolve(current, sources)
                if is_sequence(resolved) or isinstance(resolved, Mapping):
                    current = resolved
                    loaded = is_sequence(resolved)
        elif is_sequence(current):
            loaded = True

        if current is None:
            logger.debug(f"Loop target '{target}' did not resolve")
            return []

    return as_items(current)


def render_loop(block: Block, session: RenderSession) -> str:
    attrs = block.attrs
    sources = session.sources_for(block)
    target = attrs.get("target") or ""
    target = target if isinstance(target, str) else ""
    loop_id = attrs.get("loopId")

    if isinstance(loop_id, str) and loop_id:
        params = resolve_loop_params(attrs.get("loopParams"), sources, session)
        items = session.loops.get_loop_data(strip_loop_params(loop_id), params)
        if target:
            items = apply_target_modifiers(items, target, sources, session)
    else:
        items = parse_loop_target(target, sources, session)

    if not items:
        return ""

    item_key = attrs.get("itemId") or "item"
    index_key = attrs.get("indexId") or None

    rendered: list[str] = []
    for index, item in enumerate(items):
        entries = [DynamicContentEntry(EntryKind.LOCAL, item_key, item, {"loop": "item", "currentIndex": index})]
        if index_key:
            entries.append(DynamicContentEntry(EntryKind.LOCAL, index_key, index, {"loop": "index", "currentIndex": index}))
        with session.context.push_scoped(*entries):
            rendered.append(session.render_blocks(block.inner_blocks))
    return "".join(rendered)
