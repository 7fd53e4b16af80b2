"""Loop preset registry and cached data access."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from strata.cache.loops import LoopDataCache
from strata.environment.exceptions import LoopPresetNotFoundError
from strata.loops.handlers import LoopHandler
from strata.loops.params import strip_loop_params
from strata.loops.presets import HandlerType, LoopPreset

logger = logging.getLogger(__name__)


class LoopService:
    """Looks up presets by id or key and materializes their items.

    Items are memoized in a :class:`LoopDataCache` per loop id and
    parameter set.

    Example:
        >>> service = LoopService(
        ...     {"nav": {"key": "mainNav", "config": {"type": "json", "data": [{"n": 1}]}}},
        ...     default_handlers(None),
        ...     LoopDataCache(),
        ... )
        >>> service.get_loop_data("mainNav")
        [{'n': 1}]
    """

    __slots__ = ("_presets", "_handlers", "_cache")

    def __init__(
        self,
        presets: Mapping[str, LoopPreset | Mapping[str, Any]],
        handlers: Mapping[HandlerType, LoopHandler],
        cache: LoopDataCache,
    ):
        self._presets = {str(k): LoopPreset.from_dict(k, v) for k, v in presets.items()}
        self._handlers = handlers
        self._cache = cache

    def find_by_key(self, key: str) -> str | None:
        """Id of the preset whose ``key`` is ``key``, if any."""
        for loop_id, preset in self._presets.items():
            if key and preset.key == key:
                return loop_id
        return None

    def resolve_id(self, name: Any) -> str | None:
        """Preset id for an id or key (inline arguments are ignored)."""
        if not isinstance(name, str) or not name.strip():
            return None
        name = strip_loop_params(name)
        if name in self._presets:
            return name
        return self.find_by_key(name)

    def is_valid_loop_id(self, name: Any) -> bool:
        return self.resolve_id(name) is not None

    def get(self, name: str) -> LoopPreset:
        """Preset for an id or key.

        Raises:
            LoopPresetNotFoundError: If no preset matches
        """
        loop_id = self.resolve_id(name)
        if loop_id is None:
            available = sorted({*self._presets, *(p.key for p in self._presets.values() if p.key)})
            raise LoopPresetNotFoundError(str(name), available)
        return self._presets[loop_id]

    def get_loop_data(self, name: str, params: Mapping[str, Any] | None = None) -> list[Any]:
        """Items for a preset and parameter set; ``[]`` when unavailable."""
        try:
            preset = self.get(name)
        except LoopPresetNotFoundError as e:
            logger.debug(str(e))
            return []

        params = dict(params or {})
        cached = self._cache.get(preset.id, params)
        if cached is not None:
            return cached

        handler = self._handlers.get(preset.handler_type)
        if handler is None:
            logger.warning(f"No loop handler registered for '{preset.handler_type.value}' (loop '{preset.id}')")
            return []
        try:
            items = handler.get_loop_data(preset, params)
        except Exception as e:
            logger.warning(f"Loop '{preset.id}' failed: {type(e).__name__}: {e}")
            items = []

        self._cache.set(preset.id, params, items)
        return items

    @property
    def presets(self) -> dict[str, LoopPreset]:
        return dict(self._presets)
