"""combine_latest: joins several sources into tuples of their latest values."""

import threading
from typing import Any, Sequence

from rivulet.core.disposable import CancellationToken, Disposable
from rivulet.core.event import Event, EventKind
from rivulet.core.producer import Producer
from rivulet.core.stream import Observer, Sender, Stream
from rivulet.operators.flatten import as_producer

_UNSET = object()


def combine_latest(
    sources: Sequence[Producer[Any, Any] | Stream[Any, Any]],
) -> Producer[tuple[Any, ...], Any]:
    """Combine the latest values of ``sources``.

    Each start starts every source. Once every source has sent at least one
    value, each new value from any source sends a tuple of the latest value
    from each, in source order. The result completes when all sources have
    completed and fails (or interrupts) as soon as any source does.
    An empty ``sources`` completes immediately.
    """
    producers = [as_producer(source) for source in sources]

    def start_routine(sender: Sender, token: CancellationToken) -> None:
        if not producers:
            sender.send_completed()
            return

        lock = threading.RLock()
        latest: list[Any] = [_UNSET] * len(producers)
        waiting = len(producers)
        running = len(producers)

        def source_observer(index: int) -> Observer:
            def on_event(event: Event) -> None:
                nonlocal waiting, running
                with lock:
                    if event.kind is EventKind.NEXT:
                        if latest[index] is _UNSET:
                            waiting -= 1
                        latest[index] = event.value
                        if waiting == 0:
                            sender.send_next(tuple(latest))
                    elif event.kind is EventKind.COMPLETED:
                        running -= 1
                        if running == 0:
                            sender.send_completed()
                    else:
                        sender.send(event)

            return on_event

        for index, producer in enumerate(producers):
            if token.is_cancelled:
                return
            observer = source_observer(index)

            def setup(
                stream: Stream[Any, Any], handle: Disposable, observer: Observer = observer
            ) -> None:
                token.add(handle)
                stream.observe(observer)

            producer.start_with_stream(setup)

    return Producer(start_routine, name="combine_latest")
