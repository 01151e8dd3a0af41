"""Argument parser for codesync annotations.

Grammar, applied to the text captured after the keyword:

    "(" ws* label ws* [ "," ws* count ws* ] ")"

where ``label`` is ``[A-Za-z0-9_-]+`` and ``count`` is ``[0-9]+`` with a value
of at least 1. The count defaults to 2 when the comma clause is omitted.
"""

from __future__ import annotations

import string
from dataclasses import dataclass

from codesync.exceptions import AnnotationSyntaxError
from codesync.model import (
    DEFAULT_COUNT,
    Comment,
    InvalidMatch,
    InvalidReason,
    Location,
    Match,
)

OPEN = "("
CLOSE = ")"
SEPARATOR = ","

_LABEL_CHARS = frozenset(string.ascii_letters + string.digits + "-_")
_COUNT_CHARS = frozenset(string.digits)


@dataclass(frozen=True)
class ParsedArguments:
    label: str
    count: int = DEFAULT_COUNT
    explicit_count: bool = False


class _Cursor:
    __slots__ = ("text", "pos")

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def take_run(self, allowed: frozenset[str]) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in allowed:
            self.pos += 1
        return self.text[start : self.pos]


def parse_arguments(raw: str) -> ParsedArguments:
    """Parse the argument list captured after the keyword.

    Raises ``AnnotationSyntaxError`` when ``raw`` does not follow the grammar.
    Parsing never partially succeeds.
    """
    if not raw:
        raise AnnotationSyntaxError(
            InvalidReason.MISSING_ARGUMENTS, "keyword is not followed by an argument list"
        )
    cursor = _Cursor(raw)
    if cursor.peek() != OPEN:
        raise AnnotationSyntaxError(
            InvalidReason.MISSING_ARGUMENTS, "expected `(` after keyword"
        )
    if not raw.endswith(CLOSE):
        raise AnnotationSyntaxError(
            InvalidReason.UNTERMINATED, "argument list is not closed"
        )
    cursor.pos += 1
    cursor.skip_whitespace()
    label = cursor.take_run(_LABEL_CHARS)
    if not label:
        raise AnnotationSyntaxError(InvalidReason.MALFORMED, "expected a label")
    cursor.skip_whitespace()
    head = cursor.peek()
    if head == CLOSE:
        return ParsedArguments(label=label)
    if head != SEPARATOR:
        raise AnnotationSyntaxError(
            InvalidReason.MALFORMED, "expected `,` or `)` after label"
        )
    cursor.pos += 1
    cursor.skip_whitespace()
    digits = cursor.take_run(_COUNT_CHARS)
    if not digits:
        raise AnnotationSyntaxError(InvalidReason.INVALID_COUNT, "expected a count")
    try:
        count = int(digits.lstrip("0") or "0")
    except ValueError:
        # past the interpreter's int conversion limit
        raise AnnotationSyntaxError(
            InvalidReason.INVALID_COUNT, "count is too large"
        ) from None
    cursor.skip_whitespace()
    if cursor.peek() != CLOSE:
        raise AnnotationSyntaxError(
            InvalidReason.INVALID_COUNT, "unexpected text after count"
        )
    if count < 1:
        raise AnnotationSyntaxError(
            InvalidReason.INVALID_COUNT, "count must be at least 1"
        )
    return ParsedArguments(label=label, count=count, explicit_count=True)


def classify(location: Location, raw: str) -> Match:
    try:
        parsed = parse_arguments(raw)
    except AnnotationSyntaxError as exc:
        return InvalidMatch(
            location=location,
            raw=raw,
            reason=exc.reason,
            message=exc.message,
        )
    return Comment(
        location=location,
        raw=raw,
        label=parsed.label,
        count=parsed.count,
        explicit_count=parsed.explicit_count,
    )
