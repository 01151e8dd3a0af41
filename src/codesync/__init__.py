"""codesync package root."""

from codesync.engine import check, list_labels, run, show
from codesync.exceptions import CodesyncError, UnknownLabelError

__all__ = [
    "__version__",
    "CodesyncError",
    "UnknownLabelError",
    "check",
    "list_labels",
    "run",
    "show",
]

__version__ = "0.1.0"
