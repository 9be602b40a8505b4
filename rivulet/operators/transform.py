"""Per-value operators: map, filter, attempt and friends.

Each function returns a transform usable with both ``Stream.pipe`` and
``Producer.pipe``. Terminal events pass through unchanged unless the
operator says otherwise.
"""

from typing import Any, Callable

from rivulet.core.disposable import CompositeDisposable
from rivulet.core.errors import BranchError
from rivulet.core.event import Event, EventKind
from rivulet.core.stream import Observer, Sender, Transform


def map(fn: Callable[[Any], Any]) -> Transform:  # noqa: A001
    """Send ``Next(fn(v))`` for every upstream ``Next(v)``."""

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        def on_event(event: Event) -> None:
            sender.send(event.map_value(fn))

        return on_event

    return transform


def filter(predicate: Callable[[Any], bool]) -> Transform:  # noqa: A001
    """Forward only the Next values for which ``predicate`` holds."""

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        def on_event(event: Event) -> None:
            if event.kind is not EventKind.NEXT or predicate(event.value):
                sender.send(event)

        return on_event

    return transform


def attempt(check: Callable[[Any], Any]) -> Transform:
    """Run ``check`` on every value and fail the stream when it reports an error.

    ``check`` reports an error either by raising an exception or by returning
    a non-None error value; the exception or the returned value becomes the
    failure. Returning None means the value passed.

    Values that pass are forwarded unchanged. After a failure no further
    upstream value is checked or forwarded.
    """

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        def on_event(event: Event) -> None:
            if sender.is_terminated:
                return
            if event.kind is EventKind.NEXT:
                try:
                    error = check(event.value)
                except Exception as e:
                    error = e
                if error is not None:
                    sender.send_failed(error)
                    return
            sender.send(event)

        return on_event

    return transform


def attempt_map(fn: Callable[[Any], Any]) -> Transform:
    """Like ``map``, but an exception from ``fn`` fails the stream."""

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        def on_event(event: Event) -> None:
            if sender.is_terminated:
                return
            if event.kind is not EventKind.NEXT:
                sender.send(event)
                return
            try:
                value = fn(event.value)
            except Exception as e:
                sender.send_failed(e)
                return
            sender.send_next(value)

        return on_event

    return transform


def promote_errors(error_type: type | None = None) -> Transform:
    """Widen the error type of a never-failing chain.

    Events pass through untouched and this operator never produces a
    failure. It marks the point where a chain starts carrying ``error_type``
    so it can be composed with fallible stages.
    """

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        return sender.send

    return transform


def map_error(fn: Callable[[Any], Any]) -> Transform:
    """Replace the error of a Failed event with ``fn(error)``."""

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        def on_event(event: Event) -> None:
            sender.send(event.map_error(fn))

        return on_event

    return transform


def tag_errors(branch: str) -> Transform:
    """Wrap failures as ``BranchError(branch, error)``."""
    return map_error(lambda error: BranchError(branch, error))


def scan(initial: Any, fn: Callable[[Any, Any], Any]) -> Transform:
    """Send the running accumulation ``fn(acc, v)`` for every value."""

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        acc = initial

        def on_event(event: Event) -> None:
            nonlocal acc
            if event.kind is EventKind.NEXT:
                acc = fn(acc, event.value)
                sender.send_next(acc)
            else:
                sender.send(event)

        return on_event

    return transform
