"""Exception types for codesync."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codesync.model import InvalidReason


class CodesyncError(Exception):
    """Base class for every error raised by codesync."""


class AnnotationSyntaxError(CodesyncError):
    """Argument list of an annotation does not follow the grammar.

    Raised inside the argument parser only; the matcher converts it into an
    ``InvalidMatch`` so malformed input is always reported as data.
    """

    def __init__(self, reason: InvalidReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class UnknownLabelError(CodesyncError, LookupError):
    """No comment in the scanned units carries the requested label."""

    def __init__(self, label: str):
        super().__init__(f"unknown label `{label}`")
        self.label = label


class InvariantError(CodesyncError, RuntimeError):
    """A code path that should be unreachable was reached."""

    def __init__(self, reason: str, *, env: dict[str, object] | None = None):
        super().__init__(reason)
        self.reason = reason
        self.env = dict(env or {})
