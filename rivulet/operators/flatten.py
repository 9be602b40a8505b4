"""Flattening operators: flat_map and its relatives.

``flat_map`` starts an inner producer for every upstream value. The
FlattenStrategy decides how inner streams overlap:

    LATEST  at most one inner stream; a new value disposes the previous one
    MERGE   all inner streams run at once, values interleaved by arrival
    CONCAT  inner streams run one at a time in upstream order

For every strategy a failure from upstream or from an inner stream
terminates the result immediately and disposes every other inner stream.
The result completes once upstream has completed and no inner stream is
left running.
"""

import logging
import threading
from collections import deque
from enum import Enum
from typing import Any, Callable

from rivulet.core.disposable import CompositeDisposable, Disposable, SerialDisposable
from rivulet.core.event import Event, EventKind
from rivulet.core.producer import Producer
from rivulet.core.stream import Observer, Sender, Stream, Transform

_log = logging.getLogger("rivulet.operators")


class FlattenStrategy(Enum):
    """Concurrency policy for inner streams."""

    LATEST = "latest"
    MERGE = "merge"
    CONCAT = "concat"


def as_producer(source: Producer[Any, Any] | Stream[Any, Any]) -> Producer[Any, Any]:
    """Accept a hot stream wherever a producer is expected."""
    if isinstance(source, Stream):
        return Producer.from_stream(source)
    if isinstance(source, Producer):
        return source
    raise TypeError(f"expected Producer or Stream, got {type(source).__name__}")


def flat_map(strategy: FlattenStrategy, fn: Callable[[Any], Any]) -> Transform:
    """Map every value to a producer and flatten the results with ``strategy``."""
    if strategy is FlattenStrategy.LATEST:
        return _flat_map_latest(fn)
    if strategy is FlattenStrategy.MERGE:
        return _flat_map_merge(fn)
    if strategy is FlattenStrategy.CONCAT:
        return _flat_map_concat(fn)
    raise ValueError(f"unknown flatten strategy: {strategy!r}")


def flatten(strategy: FlattenStrategy) -> Transform:
    """Flatten a stream whose values are producers or streams."""
    return flat_map(strategy, lambda inner: inner)


def _flat_map_latest(fn: Callable[[Any], Any]) -> Transform:
    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        lock = threading.RLock()
        current = SerialDisposable()
        lifetime.add(current)
        generation = 0
        inner_active = False
        outer_done = False

        def inner_observer(gen: int) -> Observer:
            def on_event(event: Event) -> None:
                nonlocal inner_active
                with lock:
                    # Events from a replaced inner stream are dropped
                    if gen != generation:
                        return
                    if event.kind is EventKind.COMPLETED:
                        inner_active = False
                        if outer_done:
                            sender.send_completed()
                        return
                    sender.send(event)

            return on_event

        def on_event(event: Event) -> None:
            nonlocal generation, inner_active, outer_done
            with lock:
                if event.kind is EventKind.NEXT:
                    inner = as_producer(fn(event.value))
                    generation += 1
                    observer = inner_observer(generation)
                    if inner_active:
                        _log.debug(
                            "Disposing previous inner stream",
                            extra={"operator": "flat_map", "strategy": "latest"},
                        )
                    inner_active = True

                    def setup(stream: Stream[Any, Any], handle: Disposable) -> None:
                        current.inner = handle
                        stream.observe(observer)

                    inner.start_with_stream(setup)
                elif event.kind is EventKind.COMPLETED:
                    outer_done = True
                    if not inner_active:
                        sender.send_completed()
                else:
                    sender.send(event)

        return on_event

    return transform


def _flat_map_merge(fn: Callable[[Any], Any]) -> Transform:
    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        lock = threading.RLock()
        inners = CompositeDisposable()
        lifetime.add(inners)
        active = 0
        outer_done = False

        def inner_observer(slot: SerialDisposable) -> Observer:
            def on_event(event: Event) -> None:
                nonlocal active
                with lock:
                    if event.kind is EventKind.COMPLETED:
                        inners.remove(slot)
                        active -= 1
                        if outer_done and active == 0:
                            sender.send_completed()
                        return
                    sender.send(event)

            return on_event

        def on_event(event: Event) -> None:
            nonlocal active, outer_done
            with lock:
                if event.kind is EventKind.NEXT:
                    inner = as_producer(fn(event.value))
                    active += 1
                    slot = SerialDisposable()
                    inners.add(slot)
                    observer = inner_observer(slot)

                    def setup(stream: Stream[Any, Any], handle: Disposable) -> None:
                        slot.inner = handle
                        stream.observe(observer)

                    inner.start_with_stream(setup)
                elif event.kind is EventKind.COMPLETED:
                    outer_done = True
                    if active == 0:
                        sender.send_completed()
                else:
                    sender.send(event)

        return on_event

    return transform


def _flat_map_concat(fn: Callable[[Any], Any]) -> Transform:
    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        lock = threading.RLock()
        current = SerialDisposable()
        lifetime.add(current)
        queue: deque[Producer[Any, Any]] = deque()
        active = False
        outer_done = False
        draining = False

        def on_inner(event: Event) -> None:
            nonlocal active
            with lock:
                if event.kind is EventKind.COMPLETED:
                    active = False
                    drain()
                    return
                sender.send(event)

        def setup(stream: Stream[Any, Any], handle: Disposable) -> None:
            current.inner = handle
            stream.observe(on_inner)

        def drain() -> None:
            # Inner producers completing inside start are picked up by the loop
            nonlocal active, draining
            if draining:
                return
            draining = True
            try:
                while not active and queue and not sender.is_terminated:
                    producer = queue.popleft()
                    active = True
                    producer.start_with_stream(setup)
            finally:
                draining = False
            if not active and not queue and outer_done:
                sender.send_completed()

        def on_event(event: Event) -> None:
            nonlocal outer_done
            with lock:
                if event.kind is EventKind.NEXT:
                    queue.append(as_producer(fn(event.value)))
                    drain()
                elif event.kind is EventKind.COMPLETED:
                    outer_done = True
                    drain()
                else:
                    sender.send(event)

        return on_event

    return transform


def flat_map_error(fn: Callable[[Any], Any]) -> Transform:
    """Replace a failure with the events of the producer ``fn(error)``.

    ``flat_map_error(lambda _: Producer.empty())`` turns any failure into a
    plain completion.
    """

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        replacement = SerialDisposable()
        lifetime.add(replacement)

        def setup(stream: Stream[Any, Any], handle: Disposable) -> None:
            replacement.inner = handle
            stream.observe(sender.send)

        def on_event(event: Event) -> None:
            if event.kind is EventKind.FAILED:
                as_producer(fn(event.error)).start_with_stream(setup)
            else:
                sender.send(event)

        return on_event

    return transform


def then(replacement: Producer[Any, Any] | Stream[Any, Any]) -> Transform:
    """Wait for upstream to complete, then forward ``replacement``'s events.

    Upstream values are ignored; upstream failure and interruption still
    terminate the result.
    """
    producer = as_producer(replacement)

    def transform(sender: Sender, lifetime: CompositeDisposable) -> Observer:
        follow_up = SerialDisposable()
        lifetime.add(follow_up)

        def setup(stream: Stream[Any, Any], handle: Disposable) -> None:
            follow_up.inner = handle
            stream.observe(sender.send)

        def on_event(event: Event) -> None:
            if event.kind is EventKind.COMPLETED:
                producer.start_with_stream(setup)
            elif event.kind is not EventKind.NEXT:
                sender.send(event)

        return on_event

    return transform
