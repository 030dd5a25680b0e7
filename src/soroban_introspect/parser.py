"""Hardened parser for Soroban generic type expressions.

Type strings such as ``Vec<Map<Symbol, Option<U32>>>`` come from contract
interface descriptions and, in the form-building flow, from user supplied
overrides. Parsing is iterative over the characters of the expression: a
single left-to-right scan validates bracket balance and nesting depth before
any recursion happens, and argument lists are split by tracking the bracket
level rather than by regular expressions, so adversarial input cannot trigger
catastrophic backtracking or unbounded recursion.
"""

from __future__ import annotations

import re

from .constants import MAX_NESTING_DEPTH, MAX_TYPE_STRING_LENGTH, PRIMITIVE_TYPE_NAMES
from .exceptions import ParseError, ParseFailure
from .types import Composite, CompositeKind, Named, Primitive, TypeExpression

_ALLOWED_CHARACTERS = re.compile(r"[A-Za-z0-9<>,_\s]+")
_BYTES_N = re.compile(r"BytesN<\s*[0-9]+\s*>")

# (min, max) argument counts; None means unbounded
_ARITY: dict[CompositeKind, tuple[int, int | None]] = {
    CompositeKind.VEC: (1, 1),
    CompositeKind.OPTION: (1, 1),
    CompositeKind.MAP: (2, 2),
    CompositeKind.RESULT: (2, 2),
    CompositeKind.TUPLE: (1, None),
}


def parse_type(expression: str) -> TypeExpression:
    """Parse a type expression into a :class:`TypeExpression` tree.

    Raises:
        ParseError: With ``reason`` describing which limit or rule was violated.
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ParseError("Type expression is empty", ParseFailure.EMPTY, expression)

    if len(expression) > MAX_TYPE_STRING_LENGTH:
        raise ParseError(
            f"Type expression exceeds {MAX_TYPE_STRING_LENGTH} characters",
            ParseFailure.TOO_LONG,
            expression[:64],
        )

    if not _ALLOWED_CHARACTERS.fullmatch(expression):
        raise ParseError(
            "Type expression contains invalid characters",
            ParseFailure.INVALID_CHARACTERS,
            expression,
        )

    _check_brackets(expression)
    return _parse_segment(expression.strip(), expression)


def try_parse_type(expression: str) -> TypeExpression | None:
    try:
        return parse_type(expression)
    except ParseError:
        return None


def is_valid_type_string(expression: str) -> bool:
    return try_parse_type(expression) is not None


def split_top_level(content: str) -> list[str]:
    """Split on commas that are not nested inside ``<...>``.

    Segments are stripped but empty segments are kept so callers can reject
    inputs such as ``Map<U32,>``.
    """
    segments: list[str] = []
    level = 0
    start = 0
    for index, char in enumerate(content):
        if char == "<":
            level += 1
        elif char == ">":
            level -= 1
        elif char == "," and level == 0:
            segments.append(content[start:index].strip())
            start = index + 1
    segments.append(content[start:].strip())
    return segments


def _check_brackets(expression: str) -> None:
    level = 0
    for char in expression:
        if char == "<":
            level += 1
            if level > MAX_NESTING_DEPTH:
                raise ParseError(
                    f"Type expression nests deeper than {MAX_NESTING_DEPTH} levels",
                    ParseFailure.NESTING_TOO_DEEP,
                    expression,
                )
        elif char == ">":
            level -= 1
            if level < 0:
                raise ParseError(
                    "Unbalanced '>' in type expression",
                    ParseFailure.UNBALANCED_BRACKETS,
                    expression,
                )
    if level != 0:
        raise ParseError(
            "Unclosed '<' in type expression", ParseFailure.UNBALANCED_BRACKETS, expression
        )


def _parse_segment(segment: str, source: str) -> TypeExpression:
    if not segment:
        raise ParseError("Empty type argument", ParseFailure.WRONG_ARITY, source)

    kind = _composite_kind(segment)
    if kind is None:
        return _parse_leaf(segment, source)

    inner = segment[len(kind.value) + 1 : -1]
    arguments = split_top_level(inner)
    minimum, maximum = _ARITY[kind]
    if any(not argument for argument in arguments) or len(arguments) < minimum or (
        maximum is not None and len(arguments) > maximum
    ):
        raise ParseError(
            f"{kind.value} expects {_describe_arity(minimum, maximum)}, got '{inner.strip()}'",
            ParseFailure.WRONG_ARITY,
            source,
        )

    return Composite(kind, tuple(_parse_segment(argument, source) for argument in arguments))


def _composite_kind(segment: str) -> CompositeKind | None:
    if not segment.endswith(">"):
        return None
    for kind in CompositeKind:
        prefix = f"{kind.value}<"
        if segment.startswith(prefix) and _closes_at_end(segment, len(prefix) - 1):
            return kind
    return None


def _closes_at_end(segment: str, open_index: int) -> bool:
    """True when the bracket opened at ``open_index`` is closed by the final char."""

    level = 0
    for index in range(open_index, len(segment)):
        char = segment[index]
        if char == "<":
            level += 1
        elif char == ">":
            level -= 1
            if level == 0:
                return index == len(segment) - 1
    return False


def _parse_leaf(segment: str, source: str) -> TypeExpression:
    if segment in PRIMITIVE_TYPE_NAMES:
        return Primitive(segment)
    if _BYTES_N.fullmatch(segment):
        size = segment[len("BytesN<") : -1].strip()
        return Primitive(f"BytesN<{int(size)}>")
    if any(char.isspace() or char in "<>," for char in segment):
        raise ParseError(
            f"Malformed type name '{segment}'", ParseFailure.WRONG_ARITY, source
        )
    return Named(segment)


def _describe_arity(minimum: int, maximum: int | None) -> str:
    if maximum is None:
        return f"at least {minimum} type argument(s)"
    if minimum == maximum:
        return f"exactly {minimum} type argument(s)"
    return f"{minimum}-{maximum} type arguments"
