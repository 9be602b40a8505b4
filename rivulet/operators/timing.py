"""Time-based operators: delay and timeout_with_error."""

import logging
from enum import Enum
from typing import Any, Callable

from rivulet.core.disposable import CompositeDisposable, SerialDisposable
from rivulet.core.errors import StreamTimeoutError
from rivulet.core.event import Event, EventKind
from rivulet.core.stream import Observer, Sender, Transform
from rivulet.schedulers.base import Scheduler

_log = logging.getLogger("rivulet.operators")


class TimeoutPolicy(Enum):
    """When the timeout deadline is measured from.

    SINCE_LAST_EVENT: Every Next value restarts the deadline.
    SINCE_SUBSCRIPTION: One fixed deadline from subscription.
    """

    SINCE_LAST_EVENT = "since_last_event"
    SINCE_SUBSCRIPTION = "since_subscription"


def _schedule(
    scheduler: Scheduler,
    lifetime: CompositeDisposable,
    interval: float,
    action: Callable[[], None],
) -> None:
    """Schedule ``action`` and tie it to ``lifetime`` until it has run."""
    slot = SerialDisposable()
    lifetime.add(slot)

    def run() -> None:
        lifetime.remove(slot)
        action()

    slot.inner = scheduler.schedule_after(interval, run)


def delay(interval: float, scheduler: Scheduler) -> Transform:
    """Forward Next and Completed after ``interval`` on ``scheduler``.

    Failed and Interrupted are forwarded at once and cancel any values still
    waiting to be delivered.
    """

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        def on_event(event: Event) -> None:
            if event.kind in (EventKind.NEXT, EventKind.COMPLETED):
                _schedule(scheduler, lifetime, interval, lambda: sender.send(event))
            else:
                sender.send(event)

        return on_event

    return transform


def timeout_with_error(
    interval: float,
    scheduler: Scheduler,
    error: Any = None,
    policy: TimeoutPolicy = TimeoutPolicy.SINCE_LAST_EVENT,
) -> Transform:
    """Fail with ``error`` if the deadline passes before the stream terminates.

    The deadline starts at subscription. Under SINCE_LAST_EVENT each Next
    value restarts it; under SINCE_SUBSCRIPTION it is fixed.

    Args:
        interval: Deadline in seconds.
        scheduler: Where the deadline timer runs.
        error: Error sent on timeout. Defaults to a StreamTimeoutError.
        policy: Deadline reset policy.
    """

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        timer = SerialDisposable()
        lifetime.add(timer)

        def fire() -> None:
            _log.debug(
                f"Timed out after {interval}s",
                extra={"operator": "timeout_with_error", "kind": EventKind.FAILED.value},
            )
            sender.send_failed(error if error is not None else StreamTimeoutError(interval))

        def arm() -> None:
            timer.inner = scheduler.schedule_after(interval, fire)

        arm()

        def on_event(event: Event) -> None:
            if event.kind is EventKind.NEXT and policy is TimeoutPolicy.SINCE_LAST_EVENT:
                arm()
            sender.send(event)

        return on_event

    return transform
