"""Rivulet error hierarchy.

Domain errors are whatever the caller sends in a Failed event. The classes
here are the library's own errors, all inheriting from RivuletError.
"""

from dataclasses import dataclass
from typing import Any


class RivuletError(Exception):
    """Base error for all rivulet operations."""


class StreamTimeoutError(RivuletError):
    """Default error for ``timeout_with_error`` when none is supplied.

    Attributes:
        interval: The timeout interval in seconds.
    """

    def __init__(self, interval: float) -> None:
        self.interval = interval
        super().__init__(f"No event within {interval}s")


class StreamFailedError(RivuletError):
    """Raised from async iteration when a stream fails with a non-exception error.

    Attributes:
        error: The original error payload of the Failed event.
    """

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__(f"Stream failed: {error!r}")


class SchedulerError(RivuletError):
    """A scheduler could not schedule work (e.g. no running event loop)."""


@dataclass(frozen=True)
class BranchError:
    """Error from one branch of a composed chain.

    Tagging each branch's error with its branch name gives a chain a single
    error type without losing where a failure came from.

    Attributes:
        branch: Name of the branch that failed.
        error: The branch's original error.
    """

    branch: str
    error: Any

    def __str__(self) -> str:
        return f"{self.branch}: {self.error}"
