"""Scheduler that runs actions on a single background worker thread."""

import heapq
import itertools
import logging
import threading
import time
from typing import Callable

from rivulet.core.disposable import Disposable
from rivulet.schedulers.virtual import _ScheduledAction

_log = logging.getLogger("rivulet.schedulers")


class ThreadScheduler:
    """Runs actions in due order on one daemon worker thread.

    Actions never run concurrently, and actions due at the same instant run
    in the order they were scheduled, so a stream fed from here sees its
    events serialized and in push order. The worker starts on first use and
    sleeps on a condition until the earliest action falls due.

    An exception raised by an action is logged and the worker moves on to
    the next action.

    Args:
        name: Name of the worker thread.
    """

    def __init__(self, name: str = "rivulet-scheduler") -> None:
        self.name = name
        self._queue: list[_ScheduledAction] = []
        self._seq = itertools.count()
        self._condition = threading.Condition()
        self._worker: threading.Thread | None = None

    def now(self) -> float:
        return time.monotonic()

    def schedule_now(self, action: Callable[[], None]) -> Disposable:
        return self.schedule_after(0.0, action)

    def schedule_after(self, interval: float, action: Callable[[], None]) -> Disposable:
        with self._condition:
            item = _ScheduledAction(self.now() + max(interval, 0.0), next(self._seq), action)
            heapq.heappush(self._queue, item)
            if self._worker is None:
                self._worker = threading.Thread(target=self._run, name=self.name, daemon=True)
                self._worker.start()
            self._condition.notify()
        return Disposable(item.cancel)

    def _next_due(self) -> _ScheduledAction:
        """Block until the earliest live action is due and pop it."""
        with self._condition:
            while True:
                if not self._queue:
                    self._condition.wait()
                    continue
                item = self._queue[0]
                if item.cancelled:
                    heapq.heappop(self._queue)
                    continue
                remaining = item.due - self.now()
                if remaining <= 0:
                    return heapq.heappop(self._queue)
                self._condition.wait(remaining)

    def _run(self) -> None:
        while True:
            item = self._next_due()
            if item.cancelled:
                continue
            try:
                item.action()
            except Exception as e:
                _log.error(
                    f"Scheduled action raised exception: {e}",
                    exc_info=True,
                    extra={"error": str(e)},
                )
