"""Expression resolution: resolver, modifiers and content processing."""

from strata.resolution.modifiers import DEFAULT_MODIFIERS, ModifierRegistry, pass_sources
from strata.resolution.processor import apply, process_expression, replace_templates
from strata.resolution.resolver import apply_modifier, resolve
from strata.resolution.values import LoopRef, is_empty, is_sequence, to_display_string, unwrap

__all__ = [
    "DEFAULT_MODIFIERS",
    "LoopRef",
    "ModifierRegistry",
    "apply",
    "apply_modifier",
    "is_empty",
    "is_sequence",
    "pass_sources",
    "process_expression",
    "replace_templates",
    "resolve",
    "to_display_string",
    "unwrap",
]
