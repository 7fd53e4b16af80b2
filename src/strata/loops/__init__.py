"""Loop presets, parameter binding, data handlers and the loop service."""

from strata.loops.handlers import (
    AmbientQueryHandler,
    EntityListingHandler,
    LoopHandler,
    QueryBackend,
    StructuredDataHandler,
    StructuredQueryHandler,
    default_handlers,
)
from strata.loops.params import (
    bind_params,
    extract_default_params,
    parse_default_value,
    strip_loop_params,
)
from strata.loops.presets import HandlerType, LoopPreset
from strata.loops.service import LoopService

__all__ = [
    "AmbientQueryHandler",
    "EntityListingHandler",
    "HandlerType",
    "LoopHandler",
    "LoopPreset",
    "LoopService",
    "QueryBackend",
    "StructuredDataHandler",
    "StructuredQueryHandler",
    "bind_params",
    "default_handlers",
    "extract_default_params",
    "parse_default_value",
    "strip_loop_params",
]
