from __future__ import annotations

import os
from contextlib import contextmanager
from contextvars import ContextVar, Token
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, TypeVar

from codesync.invariants import never


T = TypeVar("T")

_ORDER_POLICY_ENV = "CODESYNC_ORDER_POLICY"
_ORDER_POLICY_CONTEXT: ContextVar["OrderPolicy | None"] = ContextVar(
    "codesync_order_policy",
    default=None,
)


class OrderPolicy(str, Enum):
    SORT = "sort"
    TRUST = "trust"
    ENFORCE = "enforce"


def sort_once(
    values: Iterable[T],
    *,
    source: str,
    key: Callable[[T], Any] | None = None,
    reverse: bool = False,
    policy: OrderPolicy | str | None = None,
) -> list[T]:
    """Return deterministic order with configurable caller-order policy.

    - `OrderPolicy.SORT`: always apply sorting.
    - `OrderPolicy.TRUST`: trust caller order without validation or sorting.
    - `OrderPolicy.ENFORCE`: require caller-monotonic order, fail via `never()` on regression.

    Policy resolution precedence:
    1. explicit `policy`
    2. context policy (`order_policy(...)`)
    3. `CODESYNC_ORDER_POLICY`
    4. default `SORT`
    """
    items = list(values)
    resolved_policy = _resolve_policy(policy)
    if resolved_policy is OrderPolicy.SORT:
        return sorted(items, key=key, reverse=reverse)
    if resolved_policy is OrderPolicy.TRUST:
        return items
    violation = _first_order_violation(items, key=key, reverse=reverse)
    if violation is not None:
        never(
            "order contract violated",
            source=source,
            previous_index=violation[0],
            current_index=violation[1],
            reverse=reverse,
        )
    return items


def _first_order_violation(
    items: list[T],
    *,
    key: Callable[[T], Any] | None,
    reverse: bool,
) -> tuple[int, int] | None:
    keys = [key(item) if key is not None else item for item in items]
    for index in range(1, len(keys)):
        previous, current = keys[index - 1], keys[index]
        regressed = current > previous if reverse else current < previous
        if regressed:
            return index - 1, index
    return None


def _normalize_policy(policy: OrderPolicy | str) -> OrderPolicy:
    if isinstance(policy, OrderPolicy):
        return policy
    try:
        return OrderPolicy(str(policy).strip().lower())
    except ValueError:
        never("unknown order policy", policy=policy)


def _order_policy_from_env() -> OrderPolicy | None:
    raw = os.environ.get(_ORDER_POLICY_ENV, "").strip()
    if not raw:
        return None
    return _normalize_policy(raw)


def _resolve_policy(policy: OrderPolicy | str | None) -> OrderPolicy:
    if policy is not None:
        return _normalize_policy(policy)
    context_policy = _ORDER_POLICY_CONTEXT.get()
    if context_policy is not None:
        return context_policy
    env_policy = _order_policy_from_env()
    if env_policy is not None:
        return env_policy
    return OrderPolicy.SORT


def get_order_policy() -> OrderPolicy:
    return _resolve_policy(None)


def set_order_policy(policy: OrderPolicy | str) -> Token[OrderPolicy | None]:
    return _ORDER_POLICY_CONTEXT.set(_normalize_policy(policy))


def reset_order_policy(token: Token[OrderPolicy | None]) -> None:
    _ORDER_POLICY_CONTEXT.reset(token)


@contextmanager
def order_policy(policy: OrderPolicy | str) -> Iterator[None]:
    token = set_order_policy(policy)
    try:
        yield
    finally:
        reset_order_policy(token)
