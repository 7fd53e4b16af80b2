"""Strata: scoped dynamic-content resolution for block trees.

Blocks carry ``{...}`` expressions in their attributes. Strata resolves
them against a stack of named sources: host globals, loop items,
component props and slot frames, with the most recently pushed source
winning.

Quickstart:
    >>> from strata import Environment
    >>> env = Environment()
    >>> env.render(
    ...     [{"blockName": "loop", "attrs": {"target": '[{"name": "foo"}, {"name": "bar"}]'},
    ...       "innerBlocks": [{"blockName": "text", "attrs": {"content": "{item.name} "}}]}],
    ... )
    'foo bar '

Components:
    >>> from strata import DictLoader, Environment
    >>> env = Environment(loader=DictLoader({"badge": {
    ...     "blocks": [{"blockName": "text", "attrs": {"content": "[{props.label}]"}}],
    ...     "props": [{"key": "label", "type": "string", "default": "new"}],
    ... }}))
    >>> env.render([{"blockName": "component", "attrs": {"ref": "badge"}}])
    '[new]'

Architecture:
Block tree → RenderSession → renderer per block → Resolver over the source stack

Pipeline stages:
1. **Expression**: Splits ``item.user['name'].toUppercase()`` into segments
2. **Resolver**: Finds the root among the sources, walks the path, applies modifiers
3. **Context**: Global, local, component and preview entries in one ordered list
4. **Renderers**: ``text``, ``element``, ``component``, ``loop``, ``slot-placeholder``

Scoping:
- A loop pushes one local entry per item (``item`` unless ``itemId`` says otherwise)
- A component body sees only globals, ``props`` and ``slots``
- Slot content renders with the caller's entries, not the component's

Thread-Safety:
Every ``Environment.render()`` call gets its own RenderSession. Sessions
share no stacks or caches, so concurrent renders from threads are safe.

"""

# Environment first: its loaders and the pattern cache import each other
from strata.environment import (
    ChoiceLoader,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FrameImbalanceError,
    FunctionLoader,
    LoopPresetNotFoundError,
    PatternNotFoundError,
    RenderDepthError,
    StrataError,
)

from strata.blocks import Block, BlockRenderer, blocks_from
from strata.cache import LoopDataCache, Pattern, PatternCache, PatternLoader, PropDefinition
from strata.context import (
    ComponentSlotContextProvider,
    DynamicContentEntry,
    DynamicContentStack,
    DynamicContextProvider,
    EntryKind,
    HostContext,
    ResetMode,
    SlotFrame,
    SourcePair,
    StaticHost,
)
from strata.expression import infer_literal, is_standalone_expression, parse_expression, split_path
from strata.loops import HandlerType, LoopPreset, LoopService, QueryBackend
from strata.render_session import (
    RenderSession,
    get_render_session,
    get_render_session_required,
    render_session,
)
from strata.resolution import LoopRef, apply, pass_sources, process_expression, resolve, to_display_string

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockRenderer",
    "ChoiceLoader",
    "ComponentSlotContextProvider",
    "DictLoader",
    "DynamicContentEntry",
    "DynamicContentStack",
    "DynamicContextProvider",
    "EntryKind",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FrameImbalanceError",
    "FunctionLoader",
    "HandlerType",
    "HostContext",
    "LoopDataCache",
    "LoopPreset",
    "LoopPresetNotFoundError",
    "LoopRef",
    "LoopService",
    "Pattern",
    "PatternCache",
    "PatternLoader",
    "PatternNotFoundError",
    "PropDefinition",
    "QueryBackend",
    "RenderDepthError",
    "RenderSession",
    "ResetMode",
    "SlotFrame",
    "SourcePair",
    "StaticHost",
    "StrataError",
    "__version__",
    "apply",
    "blocks_from",
    "get_render_session",
    "get_render_session_required",
    "infer_literal",
    "is_standalone_expression",
    "parse_expression",
    "pass_sources",
    "process_expression",
    "render_session",
    "resolve",
    "split_path",
    "to_display_string",
]
