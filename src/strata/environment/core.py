"""Strata Environment: configuration shared by every render.

The Environment holds everything that does not change between renders:
the pattern loader, loop presets and handlers, modifiers, block renderers
and render options. All mutable per-render state lives in a
:class:`~strata.render_session.RenderSession`, created per ``render()``.

Thread Safety:
    Modifier and renderer tables use copy-on-write, so registering a new
    modifier never mutates a dict another thread is reading. Renders share
    no state and can run concurrently.

Example:
    >>> from strata import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({
    ...     "card": {
    ...         "blocks": [{"blockName": "text", "attrs": {"content": "<b>{props.title}</b>"}}],
    ...         "props": [{"key": "title", "type": "string", "default": "Untitled"}],
    ...     },
    ... }))
    >>> env.render([{"blockName": "component", "attrs": {"ref": "card"}}])
    '<b>Untitled</b>'
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from strata.blocks.component import render_component
from strata.blocks.content import render_element, render_text
from strata.blocks.loop import render_loop
from strata.blocks.slot import render_slot_content, render_slot_placeholder
from strata.loops.handlers import LoopHandler, QueryBackend
from strata.loops.presets import HandlerType, LoopPreset
from strata.render_session import InitialSources, RenderSession
from strata.resolution.modifiers import DEFAULT_MODIFIERS, Modifier, ModifierRegistry

if TYPE_CHECKING:
    from strata.blocks.base import Block, BlockRenderer
    from strata.cache.patterns import PatternLoader
    from strata.context.host import HostContext

logger = logging.getLogger(__name__)

# Post-processor: (rendered html, block name) -> html
PostProcessor = Callable[[str, str], str]

DEFAULT_MAX_COMPONENT_DEPTH = 50


def default_renderers() -> dict[str, BlockRenderer]:
    return {
        "text": render_text,
        "element": render_element,
        "component": render_component,
        "loop": render_loop,
        "slot-placeholder": render_slot_placeholder,
        "slot-content": render_slot_content,
    }


@dataclass
class Environment:
    """Central configuration for rendering block trees.

    Attributes:
        loader: Pattern loader for component refs (None: no components)
        host: Host context supplying global sources (None: environment only)
        query_backend: Backend for entity and query loop handlers
        loop_presets: Loop presets by id, as ``LoopPreset`` or preset dicts
        handlers: Extra or replacement loop handlers by handler type
        autoescape: HTML-escape values substituted into text content
        post_processors: Applied in order to component and text output
        max_component_depth: Component nesting limit (recursion guard)
        slot_content_block: Block name that carries slot content
    """

    loader: PatternLoader | None = None
    host: HostContext | None = None
    query_backend: QueryBackend | None = None
    loop_presets: Mapping[str, LoopPreset | Mapping[str, Any]] = field(default_factory=dict)
    handlers: Mapping[HandlerType, LoopHandler] = field(default_factory=dict)
    autoescape: bool = True
    post_processors: Sequence[PostProcessor] = ()
    max_component_depth: int = DEFAULT_MAX_COMPONENT_DEPTH
    slot_content_block: str = "slot-content"

    _modifiers: dict[str, Modifier] = field(init=False, default_factory=lambda: dict(DEFAULT_MODIFIERS))
    _renderers: dict[str, BlockRenderer] = field(init=False, default_factory=default_renderers)

    def __post_init__(self) -> None:
        self.loop_presets = self.loop_presets or {}
        self.handlers = {HandlerType.coerce(k): v for k, v in (self.handlers or {}).items()}
        self.post_processors = tuple(self.post_processors)
        if self.max_component_depth < 1:
            raise ValueError(f"max_component_depth must be >= 1, got {self.max_component_depth}")

    @property
    def modifiers(self) -> ModifierRegistry:
        """Modifiers available in expressions (copy-on-write)."""
        return ModifierRegistry(self, "_modifiers")

    @property
    def renderers(self) -> Mapping[str, BlockRenderer]:
        return self._renderers

    def add_modifier(self, name: str, func: Modifier) -> None:
        """Register a modifier callable as ``value.name(args...)``.

        Example:
            >>> env.add_modifier("shout", lambda v: f"{v}!")
        """
        self.modifiers[name] = func

    def add_renderer(self, name: str, renderer: BlockRenderer) -> None:
        """Register (or replace) the renderer for a block name."""
        renderers = self._renderers.copy()
        renderers[name] = renderer
        self._renderers = renderers
        logger.debug(f"Registered renderer for block '{name}'")

    def new_session(self) -> RenderSession:
        return RenderSession(self)

    def render(
        self,
        blocks: Sequence[Block | Mapping[str, Any]],
        sources: InitialSources | None = None,
        *,
        global_sources: Mapping[str, Any] | None = None,
        preview: Mapping[str, Any] | None = None,
    ) -> str:
        """Render a block tree in a fresh session.

        Args:
            blocks: Blocks or parsed-block dicts
            sources: Initial local sources (``key -> value`` or entries)
            global_sources: Extra global sources, as if enqueued by the host
            preview: Preview sources, visible after everything else

        Returns:
            Rendered HTML
        """
        session = self.new_session()
        for key, value in (global_sources or {}).items():
            session.context.enqueue(key, value)
        for key, value in (preview or {}).items():
            session.context.enqueue_preview(key, value)
        return session.render(blocks, sources)


__all__ = ["DEFAULT_MAX_COMPONENT_DEPTH", "Environment", "PostProcessor", "default_renderers"]
