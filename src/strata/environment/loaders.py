"""Pattern loaders for the Strata environment.

Loaders supply component patterns to the render session's PatternCache.
They implement `get_pattern(ref)` returning a `Pattern`, and raise
`PatternNotFoundError` for unknown refs.

Built-in Loaders:
- `DictLoader`: Load from an in-memory mapping (testing/embedded)
- `FileSystemLoader`: Load ``<ref>.json`` files from directories
- `ChoiceLoader`: Try multiple loaders in order (override fallback)
- `FunctionLoader`: Wrap a callable as a loader (quick one-offs)

Custom Loaders:
Implement the PatternLoader protocol:
    ```python
    class DatabaseLoader:
        def get_pattern(self, ref: str) -> Pattern:
            row = db.query("SELECT content, props FROM patterns WHERE id = ?", ref)
            if not row:
                raise PatternNotFoundError(f"Pattern '{ref}' not found")
            return Pattern.from_dict(ref, {"blocks": row.content, "props": row.props})

        def list_patterns(self) -> list[str]:
            return [r.id for r in db.query("SELECT id FROM patterns")]
    ```

Thread-Safety:
Loaders should be thread-safe for concurrent `get_pattern()` calls.
All built-in loaders are safe.

"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from os import PathLike
from pathlib import Path
from typing import Any

from strata.cache.patterns import Pattern, PatternLoader
from strata.environment.exceptions import PatternNotFoundError

PatternData = Pattern | Mapping[str, Any]


def _to_pattern(ref: str, data: PatternData) -> Pattern:
    if isinstance(data, Pattern):
        return data
    return Pattern.from_dict(ref, data)


class DictLoader:
    """Load patterns from an in-memory mapping.

    Maps pattern refs to ``Pattern`` objects or pattern dicts of the shape
    ``{"blocks": [...], "props": [...]}``. Refs are compared as strings, so
    ``7`` and ``"7"`` name the same pattern.

    Example:
            >>> loader = DictLoader({
            ...     7: {
            ...         "blocks": [{"blockName": "text", "attrs": {"content": "{props.title}"}}],
            ...         "props": [{"key": "title", "type": {"primitive": "string"}}],
            ...     },
            ... })
            >>> loader.get_pattern("7").props[0].key
            'title'

    Raises:
        PatternNotFoundError: If the ref is not in the mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str | int, PatternData]):
        self._mapping = {str(ref): data for ref, data in mapping.items()}

    def get_pattern(self, ref: str) -> Pattern:
        ref = str(ref)
        if ref not in self._mapping:
            from difflib import get_close_matches

            available = sorted(self._mapping.keys())
            msg = f"Pattern '{ref}' not found"
            matches = get_close_matches(ref, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise PatternNotFoundError(msg)
        return _to_pattern(ref, self._mapping[ref])

    def list_patterns(self) -> list[str]:
        return sorted(self._mapping.keys())


class FileSystemLoader:
    """Load patterns from ``<ref>.json`` files in one or more directories.

    Each file holds a pattern dict (``{"blocks": [...], "props": [...]}``).
    Directories are searched in order; the first match wins.

    Example:
            >>> loader = FileSystemLoader(["patterns/custom", "patterns/default"])
            >>> loader.get_pattern("hero")  # patterns/custom/hero.json, else default

    Raises:
        PatternNotFoundError: If no directory holds the pattern
    """

    __slots__ = ("_paths", "_encoding")

    def __init__(
        self,
        paths: str | PathLike[str] | Sequence[str | PathLike[str]],
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, PathLike)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        self._encoding = encoding

    def get_pattern(self, ref: str) -> Pattern:
        ref = str(ref)
        for base in self._paths:
            path = base / f"{ref}.json"
            if path.is_file():
                try:
                    data = json.loads(path.read_text(self._encoding))
                except ValueError as e:
                    raise PatternNotFoundError(f"Pattern '{ref}' at {path} is not valid JSON: {e}") from e
                if not isinstance(data, Mapping):
                    raise PatternNotFoundError(f"Pattern '{ref}' at {path} is not a JSON object")
                return Pattern.from_dict(ref, data)
        raise PatternNotFoundError(
            f"Pattern '{ref}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_patterns(self) -> list[str]:
        """List all pattern refs in search paths."""
        refs = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.glob("*.json"):
                    refs.add(path.stem)
        return sorted(refs)


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> site = DictLoader({"card": {"blocks": []}})
            >>> shared = FileSystemLoader("patterns/")
            >>> loader = ChoiceLoader([site, shared])

    Raises:
        PatternNotFoundError: If no loader can find the pattern

    Thread-Safety:
        Safe if all child loaders are thread-safe.
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: Sequence[PatternLoader]):
        self._loaders = list(loaders)

    def get_pattern(self, ref: str) -> Pattern:
        """Try each loader in order, return first match."""
        for loader in self._loaders:
            try:
                return loader.get_pattern(ref)
            except PatternNotFoundError:
                continue
        raise PatternNotFoundError(f"Pattern '{ref}' not found in any of {len(self._loaders)} loaders")

    def list_patterns(self) -> list[str]:
        found: set[str] = set()
        for loader in self._loaders:
            found.update(loader.list_patterns())
        return sorted(found)


class FunctionLoader:
    """Wrap a callable as a pattern loader.

    The function takes a ref and returns a ``Pattern``, a pattern dict, or
    ``None`` when the pattern does not exist.

    Example:
            >>> def load(ref):
            ...     row = cms.find_pattern(ref)
            ...     return {"blocks": row.blocks, "props": row.props} if row else None
            >>> env = Environment(loader=FunctionLoader(load))

    Raises:
        PatternNotFoundError: If ``load_func`` returns ``None``
    """

    __slots__ = ("_load_func",)

    def __init__(self, load_func: Callable[[str], PatternData | None]):
        self._load_func = load_func

    def get_pattern(self, ref: str) -> Pattern:
        ref = str(ref)
        result = self._load_func(ref)
        if result is None:
            raise PatternNotFoundError(f"Pattern '{ref}' not found")
        return _to_pattern(ref, result)

    def list_patterns(self) -> list[str]:
        """FunctionLoader cannot enumerate patterns."""
        return []
