from __future__ import annotations

from codesync.model import Comment, Snapshot
from codesync.order_contract import OrderPolicy, sort_once


def labels(snapshot: Snapshot) -> tuple[str, ...]:
    return tuple(
        sort_once(snapshot.groups, source="query.labels", policy=OrderPolicy.SORT)
    )


def comments_for_label(snapshot: Snapshot, label: str) -> tuple[Comment, ...]:
    group = snapshot.groups.get(label)
    if group is None:
        return ()
    return group.comments
