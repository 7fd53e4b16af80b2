"""Block tree nodes and renderers.

Renderer modules (``component``, ``loop``, ``slot``, ``content``) are
imported by the environment, not here: the pattern cache depends on
``strata.blocks.base`` and must be importable on its own.
"""

from strata.blocks.base import Block, BlockRenderer, blocks_from

__all__ = ["Block", "BlockRenderer", "blocks_from"]
