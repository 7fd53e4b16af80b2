"""Slot placeholder and slot content renderers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from strata.context.entry import DynamicContentEntry, EntryKind

if TYPE_CHECKING:
    from strata.blocks.base import Block
    from strata.render_session import RenderSession


def render_slot_placeholder(block: Block, session: RenderSession) -> str:
    """Render the named slot of the current component in the caller's scope.

    Empty when there is no current component, the slot was not filled, or
    the same slot of the same instance is already being rendered.
    """
    name = block.attrs.get("name")
    if not isinstance(name, str) or not name:
        return ""
    frame = session.slots.current
    if frame is None:
        return ""
    content = frame.slots.get(name)
    if not content:
        return ""

    component_id = id(frame.component_block)
    with session.slot_guard_scope((component_id, name)) as entered:
        if not entered:
            return ""
        marker = DynamicContentEntry(EntryKind.SLOT, metadata={"name": name, "componentId": component_id})
        with session.slots.outer_scope(), session.context.isolated(*frame.parent_entries, marker):
            return session.render_blocks(content)


def render_slot_content(block: Block, session: RenderSession) -> str:
    """Slot content is consumed by its component, never rendered in place."""
    return ""
