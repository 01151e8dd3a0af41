from __future__ import annotations

import pytest

from codesync.exceptions import InvariantError
from codesync.order_contract import (
    OrderPolicy,
    get_order_policy,
    order_policy,
    sort_once,
)


def test_sort_policy_sorts() -> None:
    assert sort_once([3, 1, 2], source="test.sort") == [1, 2, 3]
    assert sort_once(["b", "a"], source="test.sort", reverse=True) == ["b", "a"]


def test_trust_policy_keeps_caller_order() -> None:
    assert sort_once([3, 1, 2], source="test.trust", policy="trust") == [3, 1, 2]


def test_enforce_policy_accepts_sorted_and_rejects_regression() -> None:
    assert sort_once([1, 2, 2, 5], source="test.enforce", policy=OrderPolicy.ENFORCE) == [
        1,
        2,
        2,
        5,
    ]
    with pytest.raises(InvariantError) as excinfo:
        sort_once([1, 3, 2], source="test.enforce", policy="enforce")
    assert excinfo.value.env["source"] == "test.enforce"
    assert excinfo.value.env["current_index"] == 2


def test_policy_resolution_from_context() -> None:
    assert get_order_policy() is OrderPolicy.SORT
    with order_policy("trust"):
        assert get_order_policy() is OrderPolicy.TRUST
        assert sort_once([2, 1], source="test.ctx") == [2, 1]
    with order_policy("enforce"):
        assert get_order_policy() is OrderPolicy.ENFORCE


def test_env_policy_applies_without_context(monkeypatch: pytest.MonkeyPatch) -> None:
    from codesync import order_contract

    monkeypatch.setenv("CODESYNC_ORDER_POLICY", "trust")
    token = order_contract._ORDER_POLICY_CONTEXT.set(None)
    try:
        assert get_order_policy() is OrderPolicy.TRUST
    finally:
        order_contract._ORDER_POLICY_CONTEXT.reset(token)


def test_unknown_policy_is_rejected() -> None:
    with pytest.raises(InvariantError):
        sort_once([1], source="test.bad", policy="shuffle")
