"""Path splitting for dynamic expressions.

Splits an expression into parts while respecting parentheses, brackets and
quotes::

    >>> split_path("item.title.toUppercase()")
    ('item', 'title', 'toUppercase()')
    >>> split_path("item.user['full-name']")
    ('item', 'user', 'full-name')
    >>> split_path("item.user[0]['name']")
    ('item', 'user', '0', 'name')
    >>> split_path("props['loop']($count: 2).at(0)")
    ('props', 'loop($count: 2)', 'at(0)')

Bracket contents are unquoted and become their own part. A bracket segment
directly followed by ``(`` is glued to the call that follows it.
"""

from __future__ import annotations

from functools import lru_cache


@lru_cache(maxsize=1024)
def split_path(path: str) -> tuple[str, ...]:
    """Split ``path`` into parts (memoized)."""
    if not path:
        return ()

    parts: list[str] = []
    current: list[str] = []
    paren_depth = 0
    bracket_depth = 0
    in_single = False
    in_double = False
    length = len(path)

    def flush() -> None:
        if current:
            parts.append("".join(current))
            current.clear()

    i = 0
    while i < length:
        char = path[i]
        quoted = in_single or in_double

        if char == "\\" and i + 1 < length:
            current.append(char)
            current.append(path[i + 1])
            i += 2
            continue

        if char == "(" and not quoted and bracket_depth == 0:
            paren_depth += 1
            current.append(char)
        elif char == ")" and not quoted and bracket_depth == 0:
            paren_depth = max(0, paren_depth - 1)
            current.append(char)
        elif paren_depth == 0 and bracket_depth > 0 and char == "'" and not in_double:
            in_single = not in_single
        elif paren_depth == 0 and bracket_depth > 0 and char == '"' and not in_single:
            in_double = not in_double
        elif char == "[" and not quoted and paren_depth == 0:
            if bracket_depth == 0:
                flush()
            bracket_depth += 1
        elif char == "]" and not quoted and paren_depth == 0:
            bracket_depth = max(0, bracket_depth - 1)
            glued_to_call = bracket_depth == 0 and i + 1 < length and path[i + 1] == "("
            if bracket_depth == 0 and not glued_to_call:
                flush()
        elif char == "." and bracket_depth == 0 and paren_depth == 0 and not quoted:
            flush()
        else:
            current.append(char)
        i += 1

    flush()
    return tuple(parts)
