from __future__ import annotations

from typing import Iterator

from codesync.model import KEYWORD, Location, Match, UnitScan
from codesync.parser import CLOSE, OPEN, classify


class _LineTracker:
    """Maps forward-moving character offsets to 1-based line/column pairs.

    Offsets must be requested in non-decreasing order; each call only counts
    newlines between the previous offset and the new one.
    """

    __slots__ = ("text", "pos", "line", "line_start")

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.line_start = 0

    def advance(self, offset: int) -> tuple[int, int]:
        newlines = self.text.count("\n", self.pos, offset)
        if newlines:
            self.line += newlines
            self.line_start = self.text.rfind("\n", self.pos, offset) + 1
        self.pos = offset
        return self.line, offset - self.line_start + 1


def capture_arguments(text: str, start: int) -> tuple[str, int]:
    """Return the argument list text following a keyword and its end offset.

    The captured text starts at `(` and runs through the first `)`; it is
    empty when the next non-whitespace character is not `(`, and runs to the
    end of the text when no `)` follows.
    """
    cursor = start
    length = len(text)
    while cursor < length and text[cursor].isspace():
        cursor += 1
    if cursor >= length or text[cursor] != OPEN:
        return "", start
    close = text.find(CLOSE, cursor + 1)
    end = length if close == -1 else close + 1
    return text[cursor:end], end


def iter_matches(unit: str, text: str) -> Iterator[Match]:
    """Yield one classified match per keyword occurrence, left to right.

    Each call returns a fresh generator over the same text, so the sequence
    can be restarted by calling again.
    """
    tracker = _LineTracker(text)
    index = text.find(KEYWORD)
    while index != -1:
        line, column = tracker.advance(index)
        keyword_end = index + len(KEYWORD)
        raw, _ = capture_arguments(text, keyword_end)
        location = Location(unit=unit, line=line, column=column, offset=index)
        yield classify(location, raw)
        index = text.find(KEYWORD, keyword_end)


def scan_unit(unit: str, text: str) -> UnitScan:
    return UnitScan(unit=unit, matches=tuple(iter_matches(unit, text)))
