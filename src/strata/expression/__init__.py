"""Expression parsing: paths, calls, literals and brace templates."""

from strata.expression.calls import is_call, parse_argument, parse_call, split_args
from strata.expression.literals import Literal, infer_literal, parse_number
from strata.expression.nodes import Argument, Call, Expression, Key, Segment
from strata.expression.parser import parse_expression
from strata.expression.path import split_path
from strata.expression.templates import (
    Token,
    find_and_replace,
    has_expressions,
    is_standalone_expression,
    tokenize,
)

__all__ = [
    "Argument",
    "Call",
    "Expression",
    "Key",
    "Literal",
    "Segment",
    "Token",
    "find_and_replace",
    "has_expressions",
    "infer_literal",
    "is_call",
    "is_standalone_expression",
    "parse_argument",
    "parse_call",
    "parse_expression",
    "parse_number",
    "split_args",
    "split_path",
    "tokenize",
]
