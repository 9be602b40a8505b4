"""Bridges between producers and asyncio.

``from_coroutine`` wraps async work as a Producer so it can sit in a
``flat_map`` chain; ``values`` and ``collect`` consume a Producer from
async code.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, Awaitable, Callable

from rivulet.core.disposable import CancellationToken, Disposable
from rivulet.core.errors import SchedulerError, StreamFailedError
from rivulet.core.event import Event, EventKind
from rivulet.core.producer import Producer
from rivulet.core.stream import Sender

_log = logging.getLogger("rivulet.interop")


def from_coroutine(
    factory: Callable[[], Awaitable[Any]],
    loop: asyncio.AbstractEventLoop | None = None,
    name: str | None = None,
) -> Producer[Any, BaseException]:
    """Producer that runs ``factory()`` as a task on each start.

    The task's result is sent as a single value followed by completion; an
    exception from the task becomes the failure. Disposing the start
    cancels the task and interrupts the stream.

    Args:
        factory: Zero-argument callable returning an awaitable.
        loop: Target loop. Defaults to the loop running at start time.
        name: Optional producer name for log records.
    """

    def start_routine(sender: Sender, token: CancellationToken) -> None:
        target = loop
        if target is None:
            try:
                target = asyncio.get_running_loop()
            except RuntimeError as e:
                raise SchedulerError("from_coroutine needs a running event loop") from e

        task = asyncio.ensure_future(factory(), loop=target)

        def on_done(done: asyncio.Future[Any]) -> None:
            if done.cancelled():
                sender.send_interrupted()
                return
            error = done.exception()
            if error is not None:
                _log.debug(
                    f"Coroutine raised exception: {error}",
                    extra={"producer": name, "error": str(error)},
                )
                sender.send_failed(error)
                return
            sender.send_next(done.result())
            sender.send_completed()

        task.add_done_callback(on_done)
        token.add(Disposable(task.cancel))

    return Producer(start_routine, name=name)


async def values(producer: Producer[Any, Any]) -> AsyncIterator[Any]:
    """Start ``producer`` and yield its values as they arrive.

    Raises the failure when the stream fails: exception errors are raised
    as-is, other errors wrapped in StreamFailedError. Iteration ends on
    completion or interruption. Closing the iterator disposes the start.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[Event] = asyncio.Queue()

    def on_event(event: Event) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    _, handle = producer.start(on_event)
    try:
        while True:
            event = await queue.get()
            if event.kind is EventKind.NEXT:
                yield event.value
            elif event.kind is EventKind.FAILED:
                if isinstance(event.error, BaseException):
                    raise event.error
                raise StreamFailedError(event.error)
            else:
                return
    finally:
        handle.dispose()


async def collect(producer: Producer[Any, Any]) -> list[Any]:
    """Start ``producer`` and return all of its values once it completes."""
    return [value async for value in values(producer)]
