"""Text and element renderers."""

from __future__ import annotations

import html
from typing import TYPE_CHECKING, Any

from strata.resolution.values import to_display_string

if TYPE_CHECKING:
    from strata.blocks.base import Block
    from strata.render_session import RenderSession

# Editor-only attributes never emitted
DROPPED_ATTRIBUTES = frozenset({"data-note"})

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)


def render_text(block: Block, session: RenderSession) -> str:
    """``content`` with every ``{...}`` substituted."""
    content = block.attrs.get("content")
    if not isinstance(content, str) or not content:
        return ""
    sources = session.sources_for(block)
    return session.post_process(session.substitute(content, sources), block.name)


def _attribute(name: str, value: Any) -> str:
    if value is True:
        return f" {name}"
    return f' {name}="{html.escape(to_display_string(value), quote=True)}"'


def render_element(block: Block, session: RenderSession) -> str:
    """``<tag ...>inner blocks</tag>`` with resolved attribute values.

    Attributes resolving to ``None`` or ``False`` are omitted.
    """
    tag = str(block.attrs.get("tag") or "div")
    attributes = block.attrs.get("attributes") or {}
    sources = session.sources_for(block)

    parts = [f"<{tag}"]
    for name, raw in attributes.items():
        if not isinstance(name, str) or name in DROPPED_ATTRIBUTES:
            continue
        value = session.apply(raw, sources)
        if value is None or value is False:
            continue
        parts.append(_attribute(name, value))
    parts.append(">")

    if tag in VOID_ELEMENTS:
        return session.post_process("".join(parts), block.name)

    inner = session.render_blocks(block.inner_blocks)
    return session.post_process(f"{''.join(parts)}{inner}</{tag}>", block.name)
