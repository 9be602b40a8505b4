"""Scheduler backed by an asyncio event loop."""

import asyncio
from typing import Callable

from rivulet.core.disposable import Disposable, SerialDisposable
from rivulet.core.errors import SchedulerError


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class AsyncioScheduler:
    """Runs actions on an asyncio event loop.

    Actions always execute on the loop's thread. Scheduling from another
    thread is allowed and goes through ``call_soon_threadsafe``.

    Args:
        loop: Target loop. Defaults to the loop running at scheduling time.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        loop = _running_loop()
        if loop is None:
            raise SchedulerError("AsyncioScheduler needs a running event loop or an explicit loop")
        return loop

    def now(self) -> float:
        return self._get_loop().time()

    def schedule_now(self, action: Callable[[], None]) -> Disposable:
        handle = self._get_loop().call_soon_threadsafe(action)
        return Disposable(handle.cancel)

    def schedule_after(self, interval: float, action: Callable[[], None]) -> Disposable:
        loop = self._get_loop()
        cancel = SerialDisposable()

        def arm() -> None:
            handle = loop.call_later(max(interval, 0.0), action)
            cancel.inner = Disposable(handle.cancel)

        if _running_loop() is loop:
            arm()
        else:
            cancel.inner = Disposable(loop.call_soon_threadsafe(arm).cancel)
        return cancel
