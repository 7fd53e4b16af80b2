"""Component slot context.

One frame per active component instance. A frame snapshots the caller's
entries and sources at the moment the component started rendering, so
slot content can be rendered in the caller's scope rather than in the
component's isolated one.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from strata.context.entry import DynamicContentEntry, SourcePair
from strata.environment.exceptions import FrameImbalanceError

if TYPE_CHECKING:
    from strata.blocks.base import Block


@dataclass(frozen=True, slots=True)
class SlotFrame:
    """Snapshot taken when a component instance starts rendering."""

    slots: Mapping[str, Sequence[Block]]
    component_block: Block
    parent_component_block: Block | None = None
    parent_entries: tuple[DynamicContentEntry, ...] = ()
    parent_sources: tuple[SourcePair, ...] = ()


def extract_slot_contents(block: Block, slot_block_name: str = "slot-content") -> dict[str, list[Block]]:
    """Map slot name to content blocks for a component instance.

    Only direct children are inspected, so slot content belonging to a
    nested component is never captured. The first block for a name wins.
    """
    slots: dict[str, list[Block]] = {}
    for child in block.inner_blocks:
        if child.name != slot_block_name:
            continue
        name = child.attrs.get("name")
        if not isinstance(name, str) or not name or name in slots:
            continue
        slots[name] = list(child.inner_blocks)
    return slots


class ComponentSlotContextProvider:
    """Stack of :class:`SlotFrame`, one per component being rendered."""

    __slots__ = ("_frames",)

    def __init__(self) -> None:
        self._frames: list[SlotFrame] = []

    def push(
        self,
        slots: Mapping[str, Sequence[Block]],
        component_block: Block,
        parent_component_block: Block | None = None,
        parent_entries: Sequence[DynamicContentEntry] = (),
        parent_sources: Sequence[SourcePair] = (),
    ) -> SlotFrame:
        frame = SlotFrame(
            slots=dict(slots),
            component_block=component_block,
            parent_component_block=parent_component_block,
            parent_entries=tuple(parent_entries),
            parent_sources=tuple(parent_sources),
        )
        self._frames.append(frame)
        return frame

    def pop(self) -> SlotFrame:
        if not self._frames:
            raise FrameImbalanceError("component slot stack")
        return self._frames.pop()

    @contextmanager
    def scoped(self, frame: SlotFrame) -> Iterator[SlotFrame]:
        """Keep ``frame`` on top of the stack for a ``with`` block."""
        self._frames.append(frame)
        try:
            yield frame
        finally:
            self.pop()

    @contextmanager
    def outer_scope(self) -> Iterator[SlotFrame | None]:
        """Hide the top frame for a ``with`` block.

        Slot content belongs to the caller, so placeholders inside it must
        see the caller's component frame, not the one that placed the slot.
        """
        if not self._frames:
            yield None
            return
        top = self._frames.pop()
        try:
            yield top
        finally:
            self._frames.append(top)

    @property
    def current(self) -> SlotFrame | None:
        return self._frames[-1] if self._frames else None

    def current_slots(self) -> Mapping[str, Sequence[Block]]:
        return self.current.slots if self.current else {}

    def current_component_block(self) -> Block | None:
        return self.current.component_block if self.current else None

    def current_parent_component_block(self) -> Block | None:
        return self.current.parent_component_block if self.current else None

    def current_parent_entries(self) -> tuple[DynamicContentEntry, ...]:
        return self.current.parent_entries if self.current else ()

    def current_parent_sources(self) -> tuple[SourcePair, ...]:
        return self.current.parent_sources if self.current else ()

    @property
    def depth(self) -> int:
        return len(self._frames)

    def clear(self) -> None:
        self._frames.clear()
