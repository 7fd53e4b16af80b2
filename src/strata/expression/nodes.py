"""Expression nodes for Strata dynamic expressions.

An expression such as ``props['loop']($count: props.count).slice(1)`` parses
into a root segment followed by an ordered run of segments::

    Expression(
        source="props['loop']($count: props.count).slice(1)",
        segments=(
            Key("props"),
            Call("loop", (Argument("props.count", keyword="$count"),)),
            Call("slice", (Argument("1"),)),
        ),
    )

Nodes are immutable so parsed expressions can be memoized and shared
between renders.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Argument:
    """Call argument: ``1``, ``'Y-m-d'``, ``$count: props.count``.

    ``source`` is kept as text and evaluated lazily against the sources
    active at resolution time, so it may itself be a full expression.
    """

    source: str
    keyword: str | None = None


@dataclass(frozen=True, slots=True)
class Segment:
    """Base class for path segments."""

    name: str


@dataclass(frozen=True, slots=True)
class Key(Segment):
    """Map key or sequence index: ``title``, ``0``, ``['full-name']``"""


@dataclass(frozen=True, slots=True)
class Call(Segment):
    """Modifier (or loop) call: ``toInt()``, ``slice(1, 2)``"""

    args: Sequence[Argument] = ()

    @property
    def positional(self) -> list[Argument]:
        return [a for a in self.args if a.keyword is None]

    @property
    def keywords(self) -> list[Argument]:
        return [a for a in self.args if a.keyword is not None]


@dataclass(frozen=True, slots=True)
class Expression:
    """Parsed dynamic expression (without the wrapping braces)."""

    source: str
    segments: Sequence[Segment]

    @property
    def root(self) -> str:
        """Root key the expression is resolved against."""
        return self.segments[0].name if self.segments else ""

    @property
    def root_call(self) -> Call | None:
        """Root segment when it is a call, e.g. ``preset($count: 2)``."""
        if self.segments and isinstance(self.segments[0], Call):
            return self.segments[0]
        return None

    @property
    def path(self) -> tuple[str, ...]:
        """Key names after the root, up to the first call."""
        names: list[str] = []
        for segment in self.segments[1:]:
            if isinstance(segment, Call):
                break
            names.append(segment.name)
        return tuple(names)

    @property
    def modifiers(self) -> tuple[Call, ...]:
        """All call segments after the root, in application order."""
        return tuple(s for s in self.segments[1:] if isinstance(s, Call))

    def __bool__(self) -> bool:
        return bool(self.segments)
