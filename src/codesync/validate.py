from __future__ import annotations

from typing import Iterator

from codesync.model import (
    CountMismatch,
    Issue,
    LabelGroup,
    MalformedAnnotation,
    Snapshot,
    WrongOccurrenceCount,
)
from codesync.order_contract import OrderPolicy, sort_once


def validate_group(group: LabelGroup) -> Issue | None:
    """Return the issue for one label, or None when the group is consistent.

    Disagreeing declared counts take precedence: the occurrence count is not
    checked for a label whose comments do not agree on a count.
    """
    declared_counts = group.declared_counts
    if len(declared_counts) > 1:
        return CountMismatch(
            label=group.label,
            conflicting=tuple(
                (count, group.locations_declaring(count)) for count in declared_counts
            ),
        )
    (declared,) = declared_counts
    if declared != group.actual_count:
        return WrongOccurrenceCount(
            label=group.label,
            declared=declared,
            actual=group.actual_count,
            locations=group.locations,
            defaulted=not any(comment.explicit_count for comment in group.comments),
        )
    return None


def iter_issues(snapshot: Snapshot) -> Iterator[Issue]:
    for match in snapshot.invalid:
        yield MalformedAnnotation(
            location=match.location,
            raw=match.raw,
            reason=match.reason,
            message=match.message,
        )
    for label in sort_once(
        snapshot.groups, source="validate.labels", policy=OrderPolicy.SORT
    ):
        issue = validate_group(snapshot.groups[label])
        if issue is not None:
            yield issue


def validate(snapshot: Snapshot) -> list[Issue]:
    return list(iter_issues(snapshot))
