"""Human-readable and JSON rendering of check, show and list results."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from codesync.matcher import capture_arguments
from codesync.model import (
    DEFAULT_COUNT,
    KEYWORD,
    CheckResult,
    CountMismatch,
    InvalidReason,
    Issue,
    Location,
    MalformedAnnotation,
    WrongOccurrenceCount,
)
from codesync.schema import (
    CheckResponseDTO,
    CheckSummaryDTO,
    CountGroupDTO,
    IssueDTO,
    ListResponseDTO,
    LocationDTO,
    ShowResponseDTO,
)

SourceLookup = Callable[[str], "str | None"]

MALFORMED_NOTE = (
    "comment must contain a label and an optional count, "
    "e.g., `CODESYNC(my-label)`, `CODESYNC(my-label, 3)`"
)
INVALID_COUNT_NOTE = "second argument must be a positive integer"
DEFAULTED_NOTE = (
    f"no comment gives a count, so {DEFAULT_COUNT} are expected; "
    "declare it, e.g., `CODESYNC(my-label, 1)`"
)


def pluralize(word: str, count: int) -> str:
    return word if count == 1 else f"{word}s"


def issue_message(issue: Issue) -> str:
    if isinstance(issue, MalformedAnnotation):
        if issue.reason is InvalidReason.INVALID_COUNT:
            return "invalid count"
        return "malformed codesync comment"
    if isinstance(issue, WrongOccurrenceCount):
        return (
            f"expected {issue.declared} {pluralize('comment', issue.declared)} "
            f"with label `{issue.label}`, found {issue.actual}"
        )
    return f"all comments with label `{issue.label}` must have the same count"


def issue_notes(issue: Issue) -> list[str]:
    if isinstance(issue, MalformedAnnotation):
        notes = [issue.message] if issue.message else []
        if issue.reason is InvalidReason.INVALID_COUNT:
            notes.append(INVALID_COUNT_NOTE)
        else:
            notes.append(MALFORMED_NOTE)
        return notes
    if isinstance(issue, CountMismatch):
        return [
            f"count {count} declared at {', '.join(str(loc) for loc in locations)}"
            for count, locations in issue.conflicting
        ]
    if issue.defaulted:
        return [DEFAULTED_NOTE]
    return []


def _annotation_span(text: str, location: Location) -> tuple[str, int, int] | None:
    """Return the source line and the 0-based column range to underline."""
    if location.offset >= len(text) or not text.startswith(KEYWORD, location.offset):
        return None
    line_start = text.rfind("\n", 0, location.offset) + 1
    line_end = text.find("\n", location.offset)
    if line_end == -1:
        line_end = len(text)
    _, end = capture_arguments(text, location.offset + len(KEYWORD))
    end = min(max(end, location.offset + len(KEYWORD)), line_end)
    line_text = text[line_start:line_end].rstrip("\r")
    start_col = location.offset - line_start
    return line_text, start_col, min(end - line_start, len(line_text))


@dataclass
class DiagnosticDoc:
    source: SourceLookup | None = None
    _lines: list[str] = field(default_factory=list)

    def line(self, value: str = "") -> None:
        self._lines.append(value)

    def snippet(self, locations: Sequence[Location]) -> None:
        width = len(str(max((loc.line for loc in locations), default=1)))
        pad = " " * width
        for location in locations:
            self._lines.append(f"{pad}--> {location}")
            text = self.source(location.unit) if self.source is not None else None
            span = _annotation_span(text, location) if text is not None else None
            if span is None:
                continue
            line_text, start, end = span
            self._lines.append(f"{pad} |")
            self._lines.append(f"{location.line:>{width}} | {line_text}")
            marker = " " * start + "^" * max(end - start, 1)
            self._lines.append(f"{pad} | {marker}")

    def notes(self, items: Iterable[str], *, width: int) -> None:
        for item in items:
            self._lines.append(f"{' ' * width} = note: {item}")

    def emit(self) -> str:
        return "\n".join(self._lines)


def render_issue(issue: Issue, *, source: SourceLookup | None = None) -> str:
    doc = DiagnosticDoc(source=source)
    doc.line(f"error: {issue_message(issue)}")
    doc.snippet(issue.locations)
    width = len(str(max((loc.line for loc in issue.locations), default=1)))
    doc.notes(issue_notes(issue), width=width)
    return doc.emit()


def render_summary(result: CheckResult) -> str:
    errors = len(result.issues)
    return (
        f"checked {result.comment_count} {pluralize('comment', result.comment_count)} "
        f"across {result.label_count} {pluralize('label', result.label_count)} "
        f"in {result.unit_count} {pluralize('file', result.unit_count)}: "
        f"{errors} {pluralize('error', errors)}"
    )


def render_check_text(result: CheckResult, *, source: SourceLookup | None = None) -> str:
    blocks = [render_issue(issue, source=source) for issue in result.issues]
    blocks.append(render_summary(result))
    return "\n\n".join(blocks)


def render_show_text(locations: Sequence[Location]) -> str:
    return "\n".join(str(location) for location in locations)


def render_list_text(labels: Sequence[str]) -> str:
    return "\n".join(labels)


def _location_dto(location: Location) -> LocationDTO:
    return LocationDTO(unit=location.unit, line=location.line, column=location.column)


def issue_dto(issue: Issue) -> IssueDTO:
    dto = IssueDTO(
        kind=issue.kind,
        message=issue_message(issue),
        locations=[_location_dto(loc) for loc in issue.locations],
    )
    if isinstance(issue, MalformedAnnotation):
        dto.reason = issue.reason.value
        dto.raw = issue.raw
    elif isinstance(issue, WrongOccurrenceCount):
        dto.label = issue.label
        dto.declared = issue.declared
        dto.actual = issue.actual
        dto.defaulted = issue.defaulted
    else:
        dto.label = issue.label
        dto.conflicting = [
            CountGroupDTO(
                count=count,
                locations=[_location_dto(loc) for loc in locations],
            )
            for count, locations in issue.conflicting
        ]
    return dto


def check_response(result: CheckResult) -> CheckResponseDTO:
    return CheckResponseDTO(
        clean=result.clean,
        summary=CheckSummaryDTO(
            units=result.unit_count,
            comments=result.comment_count,
            labels=result.label_count,
            invalid=result.invalid_count,
            issues=len(result.issues),
        ),
        issues=[issue_dto(issue) for issue in result.issues],
    )


def show_response(label: str, locations: Sequence[Location]) -> ShowResponseDTO:
    return ShowResponseDTO(
        label=label,
        found=bool(locations),
        locations=[_location_dto(loc) for loc in locations],
    )


def list_response(labels: Sequence[str]) -> ListResponseDTO:
    return ListResponseDTO(labels=list(labels))


def dump_json(dto) -> str:
    return json.dumps(dto.model_dump(), indent=2, sort_keys=True)
