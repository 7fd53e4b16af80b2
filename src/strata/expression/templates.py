"""Brace templates: strings with embedded ``{expression}`` placeholders.

A string is a *standalone* expression when one balanced brace pair wraps
the whole of it; the value it resolves to is then used as-is (a list stays
a list). Anything else is literal text with zero or more embedded
expressions that are substituted as strings.

Braces inside quoted arguments do not count towards nesting, so
``{item.date.format('{Y}')}`` is a single expression.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True, slots=True)
class Token:
    """Piece of a brace template.

    ``value`` is the raw text for literal tokens and the inner expression
    (without braces) for expression tokens.
    """

    value: str
    is_expression: bool = False


def _match_brace(text: str, start: int) -> int:
    """Index of the ``}`` closing the ``{`` at ``start``, or -1."""
    depth = 0
    quote: str | None = None
    prev = ""
    for i in range(start, len(text)):
        char = text[i]
        if char in "\"'" and prev != "\\":
            if quote is None:
                quote = char
            elif char == quote:
                quote = None
        elif quote is None:
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return i
        prev = char
    return -1


def is_standalone_expression(text: str) -> bool:
    """Check if ``text`` is exactly one ``{...}`` expression.

    Example:
        >>> is_standalone_expression("{a}")
        True
        >>> is_standalone_expression("{a}{b}")
        False
        >>> is_standalone_expression("{{a}")
        False
    """
    if not isinstance(text, str) or len(text) < 3:
        return False
    if text[0] != "{" or text[-1] != "}":
        return False
    return _match_brace(text, 0) == len(text) - 1


@lru_cache(maxsize=1024)
def tokenize(text: str) -> tuple[Token, ...]:
    """Split ``text`` into literal and expression tokens.

    An unterminated ``{`` and everything after it is literal text, as is an
    empty ``{}`` pair.
    """
    tokens: list[Token] = []
    literal: list[str] = []
    i = 0
    length = len(text)

    while i < length:
        if text[i] != "{":
            literal.append(text[i])
            i += 1
            continue

        end = _match_brace(text, i)
        if end == -1:
            literal.append(text[i:])
            break

        inner = text[i + 1 : end]
        if not inner.strip():
            literal.append(text[i : end + 1])
        else:
            if literal:
                tokens.append(Token("".join(literal)))
                literal = []
            tokens.append(Token(inner, is_expression=True))
        i = end + 1

    if literal:
        tokens.append(Token("".join(literal)))
    return tuple(tokens)


def has_expressions(text: str) -> bool:
    """Check if ``text`` embeds at least one expression."""
    if "{" not in text:
        return False
    return any(token.is_expression for token in tokenize(text))


def find_and_replace(text: str, callback: Callable[[str], str]) -> str:
    """Replace every embedded expression with ``callback(expression)``."""
    if "{" not in text:
        return text
    return "".join(
        callback(token.value) if token.is_expression else token.value
        for token in tokenize(text)
    )
