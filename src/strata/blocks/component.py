"""Component renderer.

Rendering a component instance goes through four steps:

1. resolve props against the caller's sources (instance attributes first)
2. push an isolated frame: ``props`` and ``slots`` only, plus globals
3. render the pattern's blocks
4. restore the caller's frame, on every exit path

Loop items and other locals of the caller do not reach the pattern body.
Slot content does see them: the slot frame keeps a snapshot of the
caller's entries for the slot placeholder to render with.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from strata.blocks.props import resolve_properties
from strata.context.entry import DynamicContentEntry, EntryKind
from strata.context.slots import SlotFrame, extract_slot_contents
from strata.environment.exceptions import RenderDepthError

if TYPE_CHECKING:
    from strata.blocks.base import Block
    from strata.render_session import RenderSession

logger = logging.getLogger(__name__)


def render_component(block: Block, session: RenderSession) -> str:
    ref = block.attrs.get("ref")
    if ref is None or ref == "":
        return ""

    pattern = session.patterns.get(ref)
    if pattern is None:
        logger.warning(f"Component reference '{ref}' does not resolve to a pattern")
        return ""
    if not pattern.blocks:
        return ""

    parent_sources = session.sources_for(block)
    parent_entries = session.non_global_entries()
    slots = extract_slot_contents(block, session.env.slot_content_block)

    raw_attributes = block.attrs.get("attributes") or {}
    instance_attributes = {
        key: session.apply(value, parent_sources)
        for key, value in raw_attributes.items()
        if isinstance(key, str)
    }
    props = resolve_properties(
        pattern.props,
        instance_attributes,
        parent_sources,
        session.loops,
        session.modifiers,
    )

    props_entry = DynamicContentEntry(
        EntryKind.COMPONENT,
        "props",
        props,
        {"parentDynamicContent": [entry.to_dict() for entry in parent_entries]},
    )
    slots_entry = DynamicContentEntry(
        EntryKind.COMPONENT_SLOTS,
        "slots",
        {name: {"empty": not content} for name, content in slots.items()},
    )
    frame = SlotFrame(
        slots=slots,
        component_block=block,
        parent_component_block=session.slots.current_component_block(),
        parent_entries=tuple(parent_entries),
        parent_sources=tuple(session.context.sources_for()),
    )

    try:
        with (
            session.component_scope(ref),
            session.context.isolated(props_entry, slots_entry),
            session.slots.scoped(frame),
        ):
            rendered = session.render_blocks(pattern.blocks)
    except RenderDepthError as e:
        logger.warning(e.format_compact())
        return ""

    return session.post_process(rendered, block.name)
