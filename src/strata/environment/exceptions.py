"""Exceptions for the Strata resolution engine.

Exception Hierarchy:
StrataError (base)
├── PatternNotFoundError      # Component reference not found by a loader
├── LoopPresetNotFoundError   # Loop preset id/key not registered
├── FrameImbalanceError       # Pop without a matching push (programming defect)
└── RenderDepthError          # Component nesting exceeded max_component_depth

Degradation Policy:
Nothing in the engine raises to the end user while rendering. Loaders raise
PatternNotFoundError and the pattern cache turns it into a negative entry;
RenderDepthError is absorbed by the component renderer. FrameImbalanceError
is the exception: it signals a defect in a renderer and always propagates.

Example:
    ```
    S-PAT-001: Pattern '42' not found. Available: 7, 12
    ```

"""

from __future__ import annotations

from enum import Enum

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes for Strata errors.

    Format: S-{CATEGORY}-{NUMBER}
    Categories: CTX (context stacks), PAT (patterns), LOOP (loop presets),
    RUN (rendering)
    """

    # Context errors (S-CTX-xxx)
    FRAME_IMBALANCE = "S-CTX-001"

    # Pattern errors (S-PAT-xxx)
    PATTERN_NOT_FOUND = "S-PAT-001"

    # Loop errors (S-LOOP-xxx)
    LOOP_PRESET_NOT_FOUND = "S-LOOP-001"

    # Runtime errors (S-RUN-xxx)
    RENDER_DEPTH = "S-RUN-001"

    @property
    def category(self) -> str:
        """Error category (e.g., 'context', 'pattern', 'loop', 'runtime')."""
        prefix = self.value.split("-")[1]
        return {
            "CTX": "context",
            "PAT": "pattern",
            "LOOP": "loop",
            "RUN": "runtime",
        }.get(prefix, "unknown")


class StrataError(Exception):
    """Base exception for all Strata errors.

    Attributes:
        code: Optional ErrorCode for searchable error identification.
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Format error as a one-line summary prefixed with its code."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class PatternNotFoundError(StrataError):
    """Pattern not found by any configured loader.

    Example:
            >>> loader.get_pattern(404)
        PatternNotFoundError: Pattern '404' not found

    """

    code: ErrorCode | None = ErrorCode.PATTERN_NOT_FOUND


class LoopPresetNotFoundError(StrataError):
    """Loop preset id (or key) is not registered."""

    code: ErrorCode | None = ErrorCode.LOOP_PRESET_NOT_FOUND

    def __init__(self, loop_id: str, available: list[str] | None = None):
        self.loop_id = loop_id
        self.available = available or []
        msg = f"Loop preset '{loop_id}' not found"
        if self.available:
            from difflib import get_close_matches

            matches = get_close_matches(loop_id, self.available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
        super().__init__(msg)


class FrameImbalanceError(StrataError):
    """A context stack was popped more often than it was pushed.

    Renderers push and pop through scoped context managers, so this only
    surfaces when code manipulates a stack by hand.
    """

    code: ErrorCode | None = ErrorCode.FRAME_IMBALANCE

    def __init__(self, stack_name: str):
        self.stack_name = stack_name
        super().__init__(f"Cannot pop from empty {stack_name}")


class RenderDepthError(StrataError):
    """Component nesting exceeded the configured maximum depth."""

    code: ErrorCode | None = ErrorCode.RENDER_DEPTH

    def __init__(self, ref: object, max_depth: int):
        self.ref = ref
        self.max_depth = max_depth
        super().__init__(
            f"Maximum component depth exceeded ({max_depth}) when rendering '{ref}'. "
            f"Check for components that include themselves: A → B → A"
        )
