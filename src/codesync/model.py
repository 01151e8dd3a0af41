from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Mapping, TypeAlias

from codesync.invariants import require

KEYWORD = "CODESYNC"
DEFAULT_COUNT = 2


@dataclass(frozen=True, order=True)
class Location:
    unit: str
    line: int
    column: int
    offset: int = 0

    def __post_init__(self) -> None:
        require(self.line >= 1, "location line must be 1-based", line=self.line)
        require(self.column >= 1, "location column must be 1-based", column=self.column)
        require(self.offset >= 0, "location offset must be non-negative", offset=self.offset)

    def __str__(self) -> str:
        return f"{self.unit}:{self.line}:{self.column}"


class InvalidReason(str, Enum):
    MISSING_ARGUMENTS = "missing_arguments"
    UNTERMINATED = "unterminated"
    MALFORMED = "malformed"
    INVALID_COUNT = "invalid_count"


@dataclass(frozen=True)
class Comment:
    """A keyword occurrence whose argument list parsed successfully."""

    location: Location
    raw: str
    label: str
    count: int = DEFAULT_COUNT
    explicit_count: bool = False

    def __post_init__(self) -> None:
        require(bool(self.label), "comment label must be non-empty")
        require(self.count >= 1, "declared count must be positive", count=self.count)


@dataclass(frozen=True)
class InvalidMatch:
    """A keyword occurrence whose trailing text fails the argument grammar."""

    location: Location
    raw: str
    reason: InvalidReason
    message: str = ""


Match: TypeAlias = Comment | InvalidMatch


@dataclass(frozen=True)
class UnitScan:
    unit: str
    matches: tuple[Match, ...] = ()

    @property
    def comments(self) -> tuple[Comment, ...]:
        return tuple(m for m in self.matches if isinstance(m, Comment))

    @property
    def invalid(self) -> tuple[InvalidMatch, ...]:
        return tuple(m for m in self.matches if isinstance(m, InvalidMatch))


@dataclass(frozen=True)
class LabelGroup:
    label: str
    comments: tuple[Comment, ...]

    @property
    def declared_counts(self) -> tuple[int, ...]:
        return tuple(sorted({comment.count for comment in self.comments}))

    @property
    def actual_count(self) -> int:
        return len(self.comments)

    @property
    def locations(self) -> tuple[Location, ...]:
        return tuple(comment.location for comment in self.comments)

    def locations_declaring(self, count: int) -> tuple[Location, ...]:
        return tuple(
            comment.location for comment in self.comments if comment.count == count
        )


@dataclass(frozen=True)
class Snapshot:
    """Immutable result of one scan run."""

    groups: Mapping[str, LabelGroup] = field(default_factory=dict)
    invalid: tuple[InvalidMatch, ...] = ()
    unit_count: int = 0

    @property
    def comment_count(self) -> int:
        return sum(group.actual_count for group in self.groups.values())


@dataclass(frozen=True)
class CountMismatch:
    kind: ClassVar[str] = "count_mismatch"

    label: str
    conflicting: tuple[tuple[int, tuple[Location, ...]], ...]

    @property
    def locations(self) -> tuple[Location, ...]:
        return tuple(
            sorted(location for _, locations in self.conflicting for location in locations)
        )


@dataclass(frozen=True)
class WrongOccurrenceCount:
    kind: ClassVar[str] = "wrong_occurrence_count"

    label: str
    declared: int
    actual: int
    locations: tuple[Location, ...]
    defaulted: bool = False


@dataclass(frozen=True)
class MalformedAnnotation:
    kind: ClassVar[str] = "malformed_annotation"

    location: Location
    raw: str
    reason: InvalidReason
    message: str = ""

    @property
    def locations(self) -> tuple[Location, ...]:
        return (self.location,)


Issue: TypeAlias = CountMismatch | WrongOccurrenceCount | MalformedAnnotation


@dataclass(frozen=True)
class CheckResult:
    issues: tuple[Issue, ...]
    comment_count: int
    label_count: int
    invalid_count: int = 0
    unit_count: int = 0

    @property
    def clean(self) -> bool:
        return not self.issues
