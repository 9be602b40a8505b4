"""Scheduler protocol for time-based operators.

Rivulet's core never blocks and never starts threads of its own. Anything
that has to happen later (``delay``, ``timeout_with_error``, async start
routines) goes through a Scheduler supplied by the caller.
"""

from typing import Callable, Protocol

from rivulet.core.disposable import Disposable


class Scheduler(Protocol):
    """Protocol defining the interface for execution contexts.

    Schedulers are responsible for:
    - Running an action as soon as possible (schedule_now)
    - Running an action after a delay (schedule_after)
    - Reporting the current time on their own clock (now)

    Disposing the returned handle cancels the action if it has not run yet.
    """

    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""
        ...

    def schedule_now(self, action: Callable[[], None]) -> Disposable:
        """Run ``action`` as soon as possible.

        Args:
            action: Zero-argument callable.

        Returns:
            A handle that cancels the action.
        """
        ...

    def schedule_after(self, interval: float, action: Callable[[], None]) -> Disposable:
        """Run ``action`` once ``interval`` seconds have passed.

        Args:
            interval: Delay in seconds.
            action: Zero-argument callable.

        Returns:
            A handle that cancels the action.
        """
        ...
