"""Run the scan pipeline and expose the check, show and list operations."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, Iterable, Iterator, TypeAlias, TypeVar

from codesync.aggregate import aggregate
from codesync.exceptions import UnknownLabelError
from codesync.invariants import require
from codesync.matcher import scan_unit
from codesync.model import CheckResult, Location, Snapshot, UnitScan
from codesync.query import comments_for_label, labels
from codesync.validate import validate

logger = logging.getLogger(__name__)

SourceUnit: TypeAlias = tuple[str, str]
T = TypeVar("T")


def _scan_pair(unit: SourceUnit) -> UnitScan:
    identifier, text = unit
    return scan_unit(identifier, text)


def iter_scans(
    items: Iterable[T],
    *,
    jobs: int = 1,
    scan_fn: Callable[[T], UnitScan | None] = _scan_pair,
) -> Iterator[UnitScan]:
    """Scan every item, on a thread pool when ``jobs`` is greater than one.

    ``scan_fn`` may return None to drop an item (e.g. an unreadable file).
    Results are yielded in completion order; ``aggregate`` restores canonical
    order afterwards.
    """
    require(jobs >= 1, "jobs must be at least 1", jobs=jobs)
    if jobs == 1:
        for item in items:
            scan = scan_fn(item)
            if scan is not None:
                yield scan
        return
    with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
        futures = [executor.submit(scan_fn, item) for item in items]
        for future in concurrent.futures.as_completed(futures):
            scan = future.result()
            if scan is not None:
                yield scan


def run(
    units: Iterable[T],
    *,
    jobs: int = 1,
    scan_fn: Callable[[T], UnitScan | None] = _scan_pair,
) -> Snapshot:
    """Scan units and return an immutable snapshot.

    By default units are ``(identifier, content)`` pairs; pass ``scan_fn`` to
    scan other carriers such as file paths.
    """
    snapshot = aggregate(iter_scans(units, jobs=jobs, scan_fn=scan_fn))
    logger.debug(
        "scanned %d unit(s): %d comment(s), %d invalid match(es)",
        snapshot.unit_count,
        snapshot.comment_count,
        len(snapshot.invalid),
    )
    return snapshot


def check(snapshot: Snapshot) -> CheckResult:
    issues = validate(snapshot)
    return CheckResult(
        issues=tuple(issues),
        comment_count=snapshot.comment_count,
        label_count=len(snapshot.groups),
        invalid_count=len(snapshot.invalid),
        unit_count=snapshot.unit_count,
    )


def show(snapshot: Snapshot, label: str) -> tuple[Location, ...]:
    comments = comments_for_label(snapshot, label)
    if not comments:
        raise UnknownLabelError(label)
    return tuple(comment.location for comment in comments)


def list_labels(snapshot: Snapshot) -> tuple[str, ...]:
    return labels(snapshot)
