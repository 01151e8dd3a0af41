from __future__ import annotations

import logging
from typing import Iterable

from codesync.model import Comment, InvalidMatch, LabelGroup, Match, Snapshot, UnitScan
from codesync.order_contract import OrderPolicy, sort_once

logger = logging.getLogger(__name__)


def aggregate(scans: Iterable[UnitScan]) -> Snapshot:
    """Merge per-unit scan results into a snapshot keyed by label.

    Scans may arrive in any order (e.g. from a worker pool); matches are put
    into canonical location order before grouping so the result does not
    depend on scheduling. These sorts always run, whatever order policy is
    active.
    """
    unit_count = 0
    matches: list[Match] = []
    for scan in scans:
        unit_count += 1
        matches.extend(scan.matches)
    ordered = sort_once(
        matches,
        source="aggregate.matches",
        key=lambda match: match.location,
        policy=OrderPolicy.SORT,
    )
    comments_by_label: dict[str, list[Comment]] = {}
    invalid: list[InvalidMatch] = []
    for match in ordered:
        if isinstance(match, Comment):
            comments_by_label.setdefault(match.label, []).append(match)
        else:
            invalid.append(match)
    groups = {
        label: LabelGroup(label=label, comments=tuple(comments_by_label[label]))
        for label in sort_once(
            comments_by_label, source="aggregate.labels", policy=OrderPolicy.SORT
        )
    }
    logger.debug(
        "aggregated %d match(es) from %d unit(s) into %d label(s)",
        len(ordered),
        unit_count,
        len(groups),
    )
    return Snapshot(groups=groups, invalid=tuple(invalid), unit_count=unit_count)
