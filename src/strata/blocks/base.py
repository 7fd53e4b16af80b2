"""Block tree nodes and the renderer protocol."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from strata.render_session import RenderSession

# Accepted block name prefixes, e.g. ``etch/loop`` -> ``loop``
_NAMESPACE_SEP = "/"


@dataclass(frozen=True, slots=True)
class Block:
    """One node of a content tree.

    Attributes:
        name: Block type, e.g. ``loop`` or ``component``
        attrs: Block attributes, possibly holding ``{...}`` expressions
        inner_blocks: Child blocks, in render order
        context: Block context supplied by the host (local sources)
    """

    name: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    inner_blocks: Sequence[Block] = ()
    context: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Block | Mapping[str, Any]) -> Block:
        """Build a block from a parsed-block mapping.

        Accepts both ``{"blockName", "attrs", "innerBlocks"}`` and
        ``{"name", "attrs", "inner_blocks"}`` shapes. A namespace prefix on the
        block name (``etch/text``) is dropped.
        """
        if isinstance(data, Block):
            return data
        name = data.get("blockName", data.get("name")) or ""
        if _NAMESPACE_SEP in name:
            name = name.rsplit(_NAMESPACE_SEP, 1)[1]
        inner = data.get("innerBlocks", data.get("inner_blocks")) or ()
        attrs = data.get("attrs") or {}
        context = data.get("context") or {}
        return cls(
            name=name,
            attrs=dict(attrs),
            inner_blocks=tuple(cls.from_dict(child) for child in inner),
            context=dict(context),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "blockName": self.name,
            "attrs": dict(self.attrs),
            "innerBlocks": [child.to_dict() for child in self.inner_blocks],
        }
        if self.context:
            data["context"] = dict(self.context)
        return data


def blocks_from(data: Sequence[Block | Mapping[str, Any]] | None) -> tuple[Block, ...]:
    """Normalize a list of blocks and/or block dicts."""
    return tuple(Block.from_dict(item) for item in data or ())


class BlockRenderer(Protocol):
    """Renders one block to text within a render session."""

    def __call__(self, block: Block, session: RenderSession) -> str: ...
