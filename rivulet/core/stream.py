"""Hot streams and their senders.

A Stream is a live, multicast channel of Events. It is mutated only through
its paired Sender, delivers synchronously on the pushing thread, and
terminates exactly once:

    Live -> Completed | Failed(error) | Interrupted

Pushing after termination is a silent no-op. When the last observation is
disposed while the stream is still live, the stream interrupts itself.
"""

import itertools
import logging
import threading
from typing import Any, Callable, Generic, TypeVar

from rivulet.core.config import (
    DEFAULT_CONFIG,
    LateObserverPolicy,
    ObserverFailureMode,
    StreamConfig,
)
from rivulet.core.disposable import CompositeDisposable, Disposable
from rivulet.core.event import Event, EventKind

T = TypeVar("T")
E = TypeVar("E")

Observer = Callable[[Event], None]
# Given the downstream sender and lifetime, returns the upstream observer
Transform = Callable[["Sender", CompositeDisposable], Observer]

_log = logging.getLogger("rivulet.stream")


class Stream(Generic[T, E]):
    """Multicast, push-based channel of Events.

    Attributes:
        name: Optional label used in log records.
        config: Late-observer and observer-failure settings.
        lifetime: Disposed when the stream terminates. Operators attach
            upstream observations and scheduled work here.
    """

    def __init__(self, name: str | None = None, config: StreamConfig | None = None) -> None:
        self.name = name
        self.config = config or DEFAULT_CONFIG
        self.lifetime = CompositeDisposable()
        self._observers: dict[int, Observer] = {}
        self._ids = itertools.count()
        self._terminal: Event | None = None
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        state = self._terminal.kind.value if self._terminal is not None else "live"
        return f"<Stream {self.name or hex(id(self))} {state}>"

    @property
    def is_terminated(self) -> bool:
        return self._terminal is not None

    @property
    def terminal_event(self) -> Event | None:
        """The stored terminal event, or None while live."""
        return self._terminal

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def observe(self, callback: Observer) -> Disposable:
        """Register ``callback`` for every subsequent event.

        On a terminated stream the callback is not registered; under
        ``LateObserverPolicy.REPLAY`` it receives the stored terminal event
        once, synchronously. The returned handle is then already disposed.
        """
        with self._lock:
            terminal = self._terminal
            if terminal is None:
                key = next(self._ids)
                self._observers[key] = callback
                return Disposable(lambda: self._remove_observer(key))

        if self.config.late_observer_policy is LateObserverPolicy.REPLAY:
            self._deliver(callback, terminal)
        return Disposable.disposed()

    def observe_next(self, fn: Callable[[T], None]) -> Disposable:
        def on_event(event: Event) -> None:
            if event.kind is EventKind.NEXT:
                fn(event.value)

        return self.observe(on_event)

    def observe_failed(self, fn: Callable[[E], None]) -> Disposable:
        def on_event(event: Event) -> None:
            if event.kind is EventKind.FAILED:
                fn(event.error)

        return self.observe(on_event)

    def observe_completed(self, fn: Callable[[], None]) -> Disposable:
        def on_event(event: Event) -> None:
            if event.kind is EventKind.COMPLETED:
                fn()

        return self.observe(on_event)

    def observe_interrupted(self, fn: Callable[[], None]) -> Disposable:
        def on_event(event: Event) -> None:
            if event.kind is EventKind.INTERRUPTED:
                fn()

        return self.observe(on_event)

    def lift(self, transform: Transform, name: str | None = None) -> "Stream[Any, Any]":
        """Derive a new stream by observing this one through ``transform``.

        The derived stream's lifetime owns the upstream observation, so
        terminating (or abandoning) the derived stream detaches it.
        """
        stream, sender = create_stream(name=name or self.name, config=self.config)
        observer = transform(sender, stream.lifetime)
        stream.lifetime.add(self.observe(observer))
        return stream

    def pipe(self, *transforms: Transform) -> "Stream[Any, Any]":
        """Apply operators left to right."""
        stream: Stream[Any, Any] = self
        for transform in transforms:
            stream = stream.lift(transform)
        return stream

    def _remove_observer(self, key: int) -> None:
        with self._lock:
            if self._observers.pop(key, None) is None:
                return
            if self._observers or self._terminal is not None:
                return
        _log.debug(
            "Last observer disposed, interrupting stream",
            extra={"stream": self.name, "kind": EventKind.INTERRUPTED.value},
        )
        self._send(Event.interrupted())

    def _send(self, event: Event) -> None:
        with self._lock:
            if self._terminal is not None:
                return
            if event.is_terminal:
                self._terminal = event
                targets = list(self._observers.values())
                self._observers.clear()
            else:
                pending = list(self._observers.items())

        if not event.is_terminal:
            for key, callback in pending:
                # Skip observers disposed earlier in this same delivery
                if key in self._observers:
                    self._deliver(callback, event)
            return

        if event.kind is EventKind.FAILED and not targets:
            _log.debug(
                "Failure dropped, stream has no observers",
                extra={"stream": self.name, "kind": event.kind.value, "error": str(event.error)},
            )
        else:
            _log.debug(
                f"Stream terminated with {event.kind.value}",
                extra={"stream": self.name, "kind": event.kind.value},
            )
        try:
            for callback in targets:
                self._deliver(callback, event)
        finally:
            self.lifetime.dispose()

    def _deliver(self, callback: Observer, event: Event) -> None:
        try:
            callback(event)
        except Exception as e:
            if self.config.observer_failure_mode is ObserverFailureMode.PROPAGATE:
                raise
            _log.error(
                f"Observer raised exception: {e}",
                exc_info=True,
                extra={"stream": self.name, "kind": event.kind.value, "error": str(e)},
            )


class Sender(Generic[T, E]):
    """Write side of a Stream.

    After a terminal push every further push is a no-op, so late or duplicate
    calls from callbacks and timers are harmless.
    """

    def __init__(self, stream: Stream[T, E]) -> None:
        self._stream = stream

    @property
    def is_terminated(self) -> bool:
        return self._stream.is_terminated

    def send(self, event: Event) -> None:
        self._stream._send(event)

    def send_next(self, value: T) -> None:
        if not self._stream.is_terminated:
            self._stream._send(Event.next(value))

    def send_failed(self, error: E) -> None:
        if not self._stream.is_terminated:
            self._stream._send(Event.failed(error))

    def send_completed(self) -> None:
        self._stream._send(Event.completed())

    def send_interrupted(self) -> None:
        self._stream._send(Event.interrupted())


def create_stream(
    name: str | None = None, config: StreamConfig | None = None
) -> tuple[Stream[Any, Any], Sender[Any, Any]]:
    """Create a live stream and the sender that feeds it."""
    stream: Stream[Any, Any] = Stream(name=name, config=config)
    return stream, Sender(stream)
