"""Loop handlers: turn a preset plus parameters into a list of items.

Query handlers delegate to a host :class:`QueryBackend`; the structured
data handler reads items straight from the preset config.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from strata.expression.literals import parse_number
from strata.loops.params import bind_params, merge_params
from strata.loops.presets import HandlerType, LoopPreset
from strata.resolution.values import is_sequence

logger = logging.getLogger(__name__)

# Query arguments that must be integers / booleans once bound
INT_ARGS = frozenset(
    {
        "posts_per_page",
        "paged",
        "offset",
        "p",
        "page_id",
        "attachment_id",
        "posts_per_archive_page",
        "nopaging",
        "number",
    }
)
BOOL_ARGS = frozenset(
    {
        "ignore_sticky_posts",
        "no_found_rows",
        "cache_results",
        "update_post_meta_cache",
        "update_post_term_cache",
        "suppress_filters",
        "hide_empty",
    }
)
_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


@runtime_checkable
class QueryBackend(Protocol):
    """Host query subsystem consumed by the query handlers."""

    def run_structured_query(self, args: Mapping[str, Any]) -> Sequence[Any]: ...

    def list_entities(self, args: Mapping[str, Any]) -> Sequence[Any]: ...

    def ambient_query_items(self, overrides: Mapping[str, Any]) -> Sequence[Any]: ...


class LoopHandler(Protocol):
    def get_loop_data(self, preset: LoopPreset, params: Mapping[str, Any]) -> list[Any]: ...


def query_args(preset: LoopPreset, params: Mapping[str, Any]) -> dict[str, Any]:
    """Preset ``args`` with defaults and ``params`` bound."""
    args = preset.args
    bound = bind_params(args, merge_params(args, params))
    return dict(bound) if isinstance(bound, Mapping) else {}


def coerce_query_args(args: Mapping[str, Any]) -> dict[str, Any]:
    """Restore numeric and boolean argument types lost to text binding."""
    result = dict(args)
    for key, value in args.items():
        if not isinstance(value, str):
            continue
        number = parse_number(value)
        if key in INT_ARGS and number is not None:
            result[key] = int(number) if math.isfinite(number) else number
        elif key in BOOL_ARGS:
            result[key] = value.strip().lower() not in _FALSE_STRINGS
    return result


def as_items(value: Any) -> list[Any]:
    """Normalize handler output: a single mapping becomes a one-item list."""
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    if is_sequence(value):
        return list(value)
    return []


class StructuredDataHandler:
    """Items from ``config["data"]`` (a list, a mapping or JSON text)."""

    def get_loop_data(self, preset: LoopPreset, params: Mapping[str, Any]) -> list[Any]:
        data = preset.config.get("data")
        data = bind_params(data, merge_params(data, params))
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                logger.debug(f"Loop '{preset.id}' data is not valid JSON")
                return []
        return as_items(data)


class _BackendHandler:
    __slots__ = ("backend",)

    def __init__(self, backend: QueryBackend | None):
        self.backend = backend

    def _require_backend(self, preset: LoopPreset) -> QueryBackend:
        if self.backend is None:
            raise LookupError(f"Loop '{preset.id}' needs a query backend, none is configured")
        return self.backend


class EntityListingHandler(_BackendHandler):
    """Entity listings (users, terms, ...) through ``list_entities``."""

    def get_loop_data(self, preset: LoopPreset, params: Mapping[str, Any]) -> list[Any]:
        args = coerce_query_args(query_args(preset, params))
        return as_items(self._require_backend(preset).list_entities(args))


class StructuredQueryHandler(_BackendHandler):
    """Content queries through ``run_structured_query``."""

    def get_loop_data(self, preset: LoopPreset, params: Mapping[str, Any]) -> list[Any]:
        args = coerce_query_args(query_args(preset, params))
        return as_items(self._require_backend(preset).run_structured_query(args))


class AmbientQueryHandler(_BackendHandler):
    """Inherit the ambient (main) query, overriding the preset's axes.

    The backend fills every axis the overrides leave unset, ``paged``
    included, from the ambient query.
    """

    def get_loop_data(self, preset: LoopPreset, params: Mapping[str, Any]) -> list[Any]:
        overrides = coerce_query_args(query_args(preset, params))
        if overrides.get("posts_per_page") == -1:
            overrides["nopaging"] = True
        return as_items(self._require_backend(preset).ambient_query_items(overrides))


def default_handlers(backend: QueryBackend | None) -> dict[HandlerType, LoopHandler]:
    return {
        HandlerType.STRUCTURED_DATA: StructuredDataHandler(),
        HandlerType.ENTITY_LISTING: EntityListingHandler(backend),
        HandlerType.STRUCTURED_QUERY: StructuredQueryHandler(backend),
        HandlerType.AMBIENT_QUERY: AmbientQueryHandler(backend),
    }
