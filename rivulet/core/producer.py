"""Cold producers.

A Producer is an immutable blueprint. Every ``start`` creates a brand-new
Stream/Sender pair and runs the start routine against it, so two starts of
the same Producer yield unrelated streams.
"""

import logging
from typing import Any, Callable, Generic, Iterable, TypeVar

from rivulet.core.config import StreamConfig
from rivulet.core.disposable import CancellationToken, Disposable
from rivulet.core.stream import Observer, Sender, Stream, Transform, create_stream

T = TypeVar("T")
E = TypeVar("E")

StartRoutine = Callable[[Sender, CancellationToken], None]

_log = logging.getLogger("rivulet.producer")


class Producer(Generic[T, E]):
    """Factory of streams wrapping a start routine.

    The start routine receives the Sender of the new stream and a
    CancellationToken. It may push synchronously or schedule work that
    pushes later. Well-behaved routines check ``token.is_cancelled`` before
    doing more work and register cleanup with ``token.add()``.

    The token is cancelled whenever the stream terminates, including when
    the start handle is disposed or the last observer leaves.
    """

    def __init__(
        self,
        start_routine: StartRoutine,
        name: str | None = None,
        config: StreamConfig | None = None,
    ) -> None:
        self._start_routine = start_routine
        self.name = name
        self.config = config

    def __repr__(self) -> str:
        return f"<Producer {self.name or hex(id(self))}>"

    def start_with_stream(
        self, setup: Callable[[Stream[T, E], Disposable], None] | None = None
    ) -> tuple[Stream[T, E], Disposable]:
        """Create a stream, hand it to ``setup``, then run the start routine.

        ``setup`` runs before any event is pushed, so observers attached
        there see events that a synchronous routine sends immediately.

        Returns:
            The new stream and the handle that interrupts it.
        """
        stream, sender = create_stream(name=self.name, config=self.config)
        token = CancellationToken()
        stream.lifetime.add(token)
        handle = Disposable(sender.send_interrupted)

        if setup is not None:
            setup(stream, handle)

        if token.is_cancelled:
            return stream, handle

        _log.debug("Starting producer", extra={"producer": self.name})
        try:
            self._start_routine(sender, token)
        except Exception as e:
            _log.error(
                f"Start routine raised exception: {e}",
                extra={"producer": self.name, "error": str(e)},
            )
            sender.send_interrupted()
            raise
        return stream, handle

    def start(self, observer: Observer | None = None) -> tuple[Stream[T, E], Disposable]:
        """Start a new stream, attaching ``observer`` before any event is sent."""

        def setup(stream: Stream[T, E], _handle: Disposable) -> None:
            if observer is not None:
                stream.observe(observer)

        return self.start_with_stream(setup)

    def start_observing_next(self, fn: Callable[[T], None]) -> Disposable:
        """Start and call ``fn`` with every Next value."""
        _, handle = self.start_with_stream(lambda stream, _: stream.observe_next(fn))
        return handle

    def start_observing_all(self, observer: Observer) -> Disposable:
        """Start and deliver every event to ``observer``."""
        _, handle = self.start(observer)
        return handle

    def lift(self, transform: Transform) -> "Producer[Any, Any]":
        """Derive a producer whose every start observes a fresh upstream start.

        Operator state lives inside ``transform``'s closure, which is built
        anew for each start.
        """

        def start_routine(sender: Sender, token: CancellationToken) -> None:
            observer = transform(sender, token)

            def setup(stream: Stream[Any, Any], handle: Disposable) -> None:
                # Upstream handle joins the token before any upstream event
                token.add(handle)
                stream.observe(observer)

            self.start_with_stream(setup)

        return Producer(start_routine, name=self.name, config=self.config)

    def pipe(self, *transforms: Transform) -> "Producer[Any, Any]":
        """Apply operators left to right."""
        producer: Producer[Any, Any] = self
        for transform in transforms:
            producer = producer.lift(transform)
        return producer

    @classmethod
    def of(cls, *values: Any) -> "Producer[Any, Any]":
        """Producer that sends ``values`` in order, then completes."""
        return cls.from_iterable(values)

    @classmethod
    def from_iterable(cls, values: Iterable[Any]) -> "Producer[Any, Any]":
        items = tuple(values)

        def start_routine(sender: Sender, token: CancellationToken) -> None:
            for value in items:
                if token.is_cancelled:
                    return
                sender.send_next(value)
            sender.send_completed()

        return cls(start_routine)

    @classmethod
    def empty(cls) -> "Producer[Any, Any]":
        """Producer that completes immediately."""
        return cls(lambda sender, token: sender.send_completed())

    @classmethod
    def never(cls) -> "Producer[Any, Any]":
        """Producer that never sends anything."""
        return cls(lambda sender, token: None)

    @classmethod
    def failed(cls, error: Any) -> "Producer[Any, Any]":
        """Producer that fails immediately with ``error``."""
        return cls(lambda sender, token: sender.send_failed(error))

    @classmethod
    def from_stream(cls, stream: Stream[Any, Any]) -> "Producer[Any, Any]":
        """Producer whose starts forward the events of an existing hot stream."""

        def start_routine(sender: Sender, token: CancellationToken) -> None:
            token.add(stream.observe(sender.send))

        return cls(start_routine, name=stream.name, config=stream.config)
