"""Dynamic context: entries, stacks, registries and providers."""

from strata.context.entry import DynamicContentEntry, EntryKind, SourcePair
from strata.context.host import HostContext, StaticHost, build_global_context
from strata.context.provider import DynamicContextProvider, ResetMode
from strata.context.registry import PreviewRegistry, SourceRegistry
from strata.context.slots import ComponentSlotContextProvider, SlotFrame, extract_slot_contents
from strata.context.stack import DynamicContentStack

__all__ = [
    "ComponentSlotContextProvider",
    "DynamicContentEntry",
    "DynamicContentStack",
    "DynamicContextProvider",
    "EntryKind",
    "HostContext",
    "PreviewRegistry",
    "ResetMode",
    "SlotFrame",
    "SourcePair",
    "SourceRegistry",
    "StaticHost",
    "build_global_context",
    "extract_slot_contents",
]
