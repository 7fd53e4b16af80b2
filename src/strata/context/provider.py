"""Dynamic context provider: the per-render view of all sources.

The provider owns four layers, lowest precedence first:

1. the global context built once from the host (``this``, ``user``,
   ``site``, ...), plus globally enqueued sources
2. host-supplied block context (only under ``ResetMode.NONE``)
3. the live stack of entries pushed by renderers
4. preview sources, always last and therefore always winning

Renderers ask for sources with :meth:`DynamicContextProvider.sources_for`
and choose how much of the caller's context to inherit via ``ResetMode``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from enum import Enum
from typing import Any

from strata.context.entry import DynamicContentEntry, EntryKind, SourcePair
from strata.context.host import HostContext, build_global_context
from strata.context.registry import PreviewRegistry, SourceRegistry
from strata.context.stack import DynamicContentStack, entries_to_sources

logger = logging.getLogger(__name__)


class ResetMode(str, Enum):
    """How much of the caller's context a new frame inherits."""

    NONE = "none"
    KEEP_GLOBAL = "keep_global"
    ALL = "all"

    @classmethod
    def coerce(cls, value: ResetMode | str | None) -> ResetMode:
        """Accept enum members, their values and the ``keepGlobal`` spelling."""
        if isinstance(value, ResetMode):
            return value
        if value == "keepGlobal":
            return cls.KEEP_GLOBAL
        try:
            return cls(value or cls.NONE.value)
        except ValueError:
            logger.debug(f"Unknown reset mode '{value}', using 'none'")
            return cls.NONE


def context_entries(context: Mapping[str, Any] | None, kind: EntryKind = EntryKind.LOCAL) -> list[DynamicContentEntry]:
    """Entries for the string keys of a host-supplied context mapping."""
    if not context:
        return []
    return [DynamicContentEntry(kind, key, value) for key, value in context.items() if isinstance(key, str) and key]


class DynamicContextProvider:
    """Request-scoped owner of the dynamic content stack and registries.

    Example:
        >>> provider = DynamicContextProvider(StaticHost(entity={"title": "Home"}))
        >>> with provider.push_scoped(DynamicContentEntry.local("item", {"n": 1})):
        ...     [pair.key for pair in provider.sources_for()]
        ['this', 'environment', 'item']
    """

    def __init__(self, host: HostContext | None = None):
        self.host = host
        self.registry = SourceRegistry()
        self.preview = PreviewRegistry()
        self._stack = DynamicContentStack()
        self._global_context: dict[str, Any] | None = None

    # -- global context ----------------------------------------------------

    def global_context(self) -> dict[str, Any]:
        """Host data under the global root keys, built once per request."""
        if self._global_context is None:
            self._global_context = build_global_context(self.host)
        return self._global_context

    def global_entries(self) -> list[DynamicContentEntry]:
        """Global context entries followed by enqueued global sources."""
        return [*context_entries(self.global_context(), EntryKind.GLOBAL), *self.registry.list()]

    # -- enqueued sources --------------------------------------------------

    def enqueue(self, key: str, source: Any) -> None:
        self.registry.enqueue(key, source)

    def dequeue(self, key: str) -> None:
        self.registry.dequeue(key)

    def enqueue_preview(self, key: str, source: Any) -> None:
        self.preview.enqueue(key, source)

    def dequeue_preview(self, key: str) -> None:
        self.preview.dequeue(key)

    # -- live stack --------------------------------------------------------

    def push(self, entry: DynamicContentEntry) -> None:
        self._stack.push(entry)

    def pop(self) -> DynamicContentEntry:
        return self._stack.pop()

    def push_scoped(self, *entries: DynamicContentEntry):
        """Push ``entries`` for the duration of a ``with`` block."""
        return self._stack.push_scoped(*entries)

    @contextmanager
    def isolated(self, *entries: DynamicContentEntry) -> Iterator[DynamicContentStack]:
        """Replace the live stack with ``entries`` for a ``with`` block.

        Globals, enqueued sources and previews stay visible; everything the
        caller pushed is hidden until the block exits.
        """
        saved = self._stack
        self._stack = DynamicContentStack(entries)
        try:
            yield self._stack
        finally:
            self._stack = saved

    @property
    def entries(self) -> list[DynamicContentEntry]:
        """Live stack entries, oldest first."""
        return self._stack.all()

    def get_stack(self) -> DynamicContentStack:
        """Full stack: globals, live entries, then previews."""
        return DynamicContentStack([*self.global_entries(), *self._stack.all(), *self.preview.list()])

    def sources_for(
        self,
        host_context: Mapping[str, Any] | None = None,
        added: Iterable[DynamicContentEntry] = (),
        reset: ResetMode | str = ResetMode.NONE,
    ) -> list[SourcePair]:
        """Sources visible to a block.

        Args:
            host_context: Block context supplied by the host (local entries)
            added: Entries the block adds for itself
            reset: ``none`` inherits everything, ``keep_global`` only the
                global entries, ``all`` nothing

        Returns:
            Source pairs, lowest precedence first; previews always last
        """
        mode = ResetMode.coerce(reset)
        added_entries = list(added)

        if mode is ResetMode.ALL:
            entries: Sequence[DynamicContentEntry] = added_entries
        elif mode is ResetMode.KEEP_GLOBAL:
            entries = [*self.global_entries(), *self._stack.only_kind(EntryKind.GLOBAL), *added_entries]
        else:
            entries = [
                *self.global_entries(),
                *context_entries(host_context),
                *self._stack.all(),
                *added_entries,
            ]

        return entries_to_sources([*entries, *self.preview.list()])

    def clear(self) -> None:
        """Drop live stack entries."""
        self._stack = DynamicContentStack()

    def reset(self) -> None:
        """Forget everything: global context memo, stack and registries."""
        self._global_context = None
        self._stack = DynamicContentStack()
        self.registry.clear()
        self.preview.clear()

    def __repr__(self) -> str:
        return f"<DynamicContextProvider entries={len(self._stack)}>"
