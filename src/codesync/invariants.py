"""Invariant markers for codesync."""

from __future__ import annotations

from typing import NoReturn

from codesync.exceptions import InvariantError


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The env payload is diagnostic metadata attached to the raised error.
    """
    raise InvariantError(reason or "never() reached", env=env)


def require(condition: bool, reason: str, **env: object) -> None:
    if not condition:
        never(reason, **env)
