"""Strata RenderSession: request-scoped render state.

A RenderSession owns every piece of mutable state a render pass needs:
the dynamic context provider, the component slot stack, the pattern and
loop data caches and the slot recursion guard. Nothing is shared between
sessions, so two renders never see each other's frames or cached loops.

The active session is also published through a ContextVar so that custom
renderers and modifiers can reach it without threading it through every
call.

Thread Safety:
    Each ``Environment.render()`` call creates its own session, and
    ContextVars are thread-local. Concurrent renders in threads are safe.

"""

from __future__ import annotations

import html
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from strata.blocks.base import Block, blocks_from
from strata.cache.loops import LoopDataCache
from strata.cache.patterns import PatternCache
from strata.context.entry import DynamicContentEntry, EntryKind, SourcePair
from strata.context.provider import DynamicContextProvider, ResetMode
from strata.context.slots import ComponentSlotContextProvider
from strata.environment.exceptions import RenderDepthError
from strata.expression.templates import find_and_replace
from strata.loops.handlers import default_handlers
from strata.loops.service import LoopService
from strata.resolution.modifiers import Modifier
from strata.resolution.processor import apply, process_expression
from strata.resolution.resolver import resolve
from strata.resolution.values import to_display_string

if TYPE_CHECKING:
    from strata.environment.core import Environment

InitialSources = Mapping[str, Any] | Iterable[DynamicContentEntry | SourcePair | Mapping[str, Any]]


def initial_entries(sources: InitialSources | None) -> list[DynamicContentEntry]:
    """Normalize caller-supplied sources into local stack entries.

    Accepts a ``key -> source`` mapping, or a sequence of entries, source
    pairs and entry dicts.
    """
    if not sources:
        return []
    if isinstance(sources, Mapping):
        return [DynamicContentEntry.local(key, value) for key, value in sources.items() if isinstance(key, str) and key]
    entries: list[DynamicContentEntry] = []
    for item in sources:
        if isinstance(item, DynamicContentEntry):
            entries.append(item)
        elif isinstance(item, SourcePair):
            entries.append(DynamicContentEntry.local(item.key, item.source))
        elif isinstance(item, Mapping):
            entries.append(DynamicContentEntry.from_dict(item))
    return entries


@dataclass
class RenderSession:
    """Per-render state isolated from the environment's configuration.

    Attributes:
        env: Environment supplying renderers, modifiers and collaborators
        context: Dynamic context provider (globals, live stack, previews)
        slots: Component slot frames, one per component being rendered
        patterns: Pattern cache over the environment's loader
        loop_cache: Loop data cache keyed by loop id and parameters
        loops: Loop preset service backed by ``loop_cache``
        slot_guard: (component block id, slot name) pairs being rendered
        component_depth: Current component nesting depth
    """

    env: Environment
    context: DynamicContextProvider = field(init=False)
    slots: ComponentSlotContextProvider = field(init=False)
    patterns: PatternCache = field(init=False)
    loop_cache: LoopDataCache = field(init=False)
    loops: LoopService = field(init=False)
    slot_guard: list[tuple[int, str]] = field(default_factory=list)
    component_depth: int = 0

    def __post_init__(self) -> None:
        self.context = DynamicContextProvider(self.env.host)
        self.slots = ComponentSlotContextProvider()
        self.patterns = PatternCache(self.env.loader)
        self.loop_cache = LoopDataCache()
        handlers = {**default_handlers(self.env.query_backend), **self.env.handlers}
        self.loops = LoopService(self.env.loop_presets, handlers, self.loop_cache)

    @property
    def modifiers(self) -> Mapping[str, Modifier]:
        return self.env.modifiers

    # -- sources and values ------------------------------------------------

    def sources_for(
        self,
        block: Block | None = None,
        added: Iterable[DynamicContentEntry] = (),
        reset: ResetMode | str = ResetMode.NONE,
    ) -> list[SourcePair]:
        """Sources visible to ``block`` (its host context included)."""
        return self.context.sources_for(block.context if block else None, added, reset)

    def apply(self, value: Any, sources: Sequence[SourcePair]) -> Any:
        return apply(value, sources, self.modifiers)

    def evaluate(self, expression: str, sources: Sequence[SourcePair]) -> Any:
        """Expression text (no braces) to a value: literal, then sources."""
        return process_expression(expression, sources, self.modifiers)

    def resolve(self, expression: str, sources: Sequence[SourcePair], *, keep_loop_ref: bool = False) -> Any:
        return resolve(expression, sources, keep_loop_ref=keep_loop_ref, modifiers=self.modifiers)

    def substitute(self, text: str, sources: Sequence[SourcePair]) -> str:
        """Replace ``{...}`` in ``text``; values are escaped under autoescape."""
        modifiers = self.modifiers
        escape = self.env.autoescape

        def replace(expression: str) -> str:
            value = to_display_string(process_expression(expression, sources, modifiers))
            return html.escape(value) if escape else value

        return find_and_replace(text, replace)

    # -- rendering ---------------------------------------------------------

    def render_block(self, block: Block) -> str:
        renderer = self.env.renderers.get(block.name)
        if renderer is None:
            return self.render_blocks(block.inner_blocks)
        return renderer(block, self)

    def render_blocks(self, blocks: Iterable[Block]) -> str:
        return "".join(self.render_block(block) for block in blocks)

    def render(
        self,
        blocks: Sequence[Block | Mapping[str, Any]],
        initial_sources: InitialSources | None = None,
    ) -> str:
        """Render a block tree with optional initial local sources.

        Example:
            >>> session = Environment().new_session()
            >>> session.render(
            ...     [{"blockName": "text", "attrs": {"content": "Hi {user.name}"}}],
            ...     {"user": {"name": "Ada"}},
            ... )
            'Hi Ada'
        """
        token = set_render_session(self)
        try:
            with self.context.push_scoped(*initial_entries(initial_sources)):
                return self.render_blocks(blocks_from(blocks))
        finally:
            reset_render_session(token)

    def post_process(self, text: str, block_name: str) -> str:
        for processor in self.env.post_processors:
            text = processor(text, block_name)
        return text

    @contextmanager
    def component_scope(self, ref: object) -> Iterator[int]:
        """Track component nesting depth.

        Raises:
            RenderDepthError: If depth would exceed ``max_component_depth``
        """
        if self.component_depth >= self.env.max_component_depth:
            raise RenderDepthError(ref, self.env.max_component_depth)
        self.component_depth += 1
        try:
            yield self.component_depth
        finally:
            self.component_depth -= 1

    @contextmanager
    def slot_guard_scope(self, key: tuple[int, str]) -> Iterator[bool]:
        """Yield False when ``key`` is already rendering (recursion)."""
        if key in self.slot_guard:
            yield False
            return
        self.slot_guard.append(key)
        try:
            yield True
        finally:
            self.slot_guard.pop()

    def non_global_entries(self) -> list[DynamicContentEntry]:
        """Live stack entries that are not global sources."""
        return [entry for entry in self.context.entries if entry.kind is not EntryKind.GLOBAL]

    def reset(self) -> None:
        """Clear all request-scoped state."""
        self.context.reset()
        self.slots.clear()
        self.patterns.clear()
        self.loop_cache.clear()
        self.slot_guard.clear()
        self.component_depth = 0


# Module-level ContextVar
_render_session: ContextVar[RenderSession | None] = ContextVar(
    "render_session",
    default=None,
)


def get_render_session() -> RenderSession | None:
    """Get current render session (None if not in render)."""
    return _render_session.get()


def get_render_session_required() -> RenderSession:
    """Get current render session, raise if not in render.

    Raises:
        RuntimeError: If not in a render session
    """
    session = _render_session.get()
    if session is None:
        raise RuntimeError("Not in a render session")
    return session


@contextmanager
def render_session(env: Environment) -> Iterator[RenderSession]:
    """Context manager for render-scoped state.

    Creates a new RenderSession and sets it as the current session for the
    duration of the with block. Automatically restores the previous
    session when exiting.

    Example:
        with render_session(env) as session:
            session.context.enqueue("campaign", {"name": "Spring"})
            html = session.render(blocks)
    """
    session = RenderSession(env)
    token = set_render_session(session)
    try:
        yield session
    finally:
        reset_render_session(token)


def set_render_session(session: RenderSession) -> Token[RenderSession | None]:
    """Set a RenderSession and return the reset token."""
    return _render_session.set(session)


def reset_render_session(token: Token[RenderSession | None]) -> None:
    """Reset render session using a token from set_render_session."""
    _render_session.reset(token)
