"""Deterministic virtual-time scheduler.

Nothing runs until the clock is moved with ``advance``, ``advance_to`` or
``run``. Actions due at the same instant run in the order they were
scheduled. Used by tests and demos to drive ``delay`` and
``timeout_with_error`` without real waiting.
"""

import heapq
import itertools
import threading
from dataclasses import dataclass, field
from typing import Callable

from rivulet.core.disposable import Disposable


@dataclass(order=True)
class _ScheduledAction:
    due: float
    seq: int
    action: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class VirtualTimeScheduler:
    """Scheduler with a manually advanced clock.

    Args:
        start: Initial clock value in seconds.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[_ScheduledAction] = []
        self._seq = itertools.count()
        self._lock = threading.RLock()

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of scheduled actions that have not run or been cancelled."""
        with self._lock:
            return sum(1 for item in self._queue if not item.cancelled)

    def schedule_now(self, action: Callable[[], None]) -> Disposable:
        """Queue ``action`` at the current instant; it runs on the next advance."""
        return self.schedule_after(0.0, action)

    def schedule_after(self, interval: float, action: Callable[[], None]) -> Disposable:
        with self._lock:
            item = _ScheduledAction(self._now + max(interval, 0.0), next(self._seq), action)
            heapq.heappush(self._queue, item)
        return Disposable(item.cancel)

    def advance(self, by: float = 0.0) -> None:
        """Move the clock forward by ``by`` seconds, running due actions."""
        self.advance_to(self._now + by)

    def advance_to(self, target: float) -> None:
        """Run every action due at or before ``target`` in due order.

        Actions scheduled while advancing run too if they fall due before
        ``target``.
        """
        while True:
            with self._lock:
                if not self._queue or self._queue[0].due > target:
                    break
                item = heapq.heappop(self._queue)
                if item.cancelled:
                    continue
                self._now = max(self._now, item.due)
            item.action()
        self._now = max(self._now, target)

    def run(self) -> None:
        """Run until no actions remain."""
        while True:
            with self._lock:
                live = [item for item in self._queue if not item.cancelled]
                if not live:
                    self._queue.clear()
                    return
                target = max(item.due for item in live)
            self.advance_to(target)
