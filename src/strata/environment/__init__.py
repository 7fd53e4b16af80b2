"""Strata environment: configuration, pattern loaders and exceptions."""

from strata.environment.exceptions import (
    ErrorCode,
    FrameImbalanceError,
    LoopPresetNotFoundError,
    PatternNotFoundError,
    RenderDepthError,
    StrataError,
)
from strata.environment.loaders import ChoiceLoader, DictLoader, FileSystemLoader, FunctionLoader
from strata.environment.core import DEFAULT_MAX_COMPONENT_DEPTH, Environment, PostProcessor

__all__ = [
    "DEFAULT_MAX_COMPONENT_DEPTH",
    "ChoiceLoader",
    "DictLoader",
    "Environment",
    "ErrorCode",
    "FileSystemLoader",
    "FrameImbalanceError",
    "FunctionLoader",
    "LoopPresetNotFoundError",
    "PatternNotFoundError",
    "PostProcessor",
    "RenderDepthError",
    "StrataError",
]
