"""Request-scoped memoizers for patterns and loop data."""

from strata.cache.loops import LoopDataCache
from strata.cache.patterns import Pattern, PatternCache, PatternLoader, PropDefinition

__all__ = ["LoopDataCache", "Pattern", "PatternCache", "PatternLoader", "PropDefinition"]
