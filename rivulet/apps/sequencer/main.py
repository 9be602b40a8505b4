"""Tap-triggered step sequence demo.

A headless take on a multi-step view animation: every tap on a trigger runs
a chain of timed steps, each starting when the previous one finishes, with a
pause before the last. Tapping again while a run is in flight abandons it
and starts over (``flat_map(LATEST)``).

Whether a run is in flight is derived from the streams themselves rather
than a shared flag: taps and finished runs are both numbered, and
``combine_latest`` compares the latest of each.

Usage:
    python -m rivulet.apps.sequencer.main
"""

import asyncio
from dataclasses import dataclass
from functools import partial

from rivulet import operators as ops
from rivulet.core.disposable import CancellationToken, Disposable
from rivulet.core.logging import configure_logging, get_logger
from rivulet.core.producer import Producer
from rivulet.core.stream import Sender, Stream, create_stream
from rivulet.operators import FlattenStrategy
from rivulet.schedulers import AsyncioScheduler, Scheduler

_log = get_logger("rivulet.apps.sequencer")


@dataclass(frozen=True)
class Step:
    """One timed step of a sequence."""

    name: str
    duration: float


DEFAULT_STEPS = (
    Step("slide-out-first", 0.5),
    Step("slide-out-second", 0.5),
    Step("slide-out-third", 0.5),
    Step("stretch-fourth", 0.5),
)


def _starting_with(value: int, producer: Producer) -> Producer:
    return Producer.of(Producer.of(value), producer).pipe(ops.flatten(FlattenStrategy.CONCAT))


class Sequencer:
    """Runs ``steps`` once per tap.

    Args:
        scheduler: Where step timers run.
        steps: Steps in order; the pause happens before the last one.
        pause: Seconds to wait before the last step.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        steps: tuple[Step, ...] = DEFAULT_STEPS,
        pause: float = 1.0,
    ) -> None:
        if not steps:
            raise ValueError("steps must not be empty")
        self.scheduler = scheduler
        self.steps = steps
        self.pause = pause
        self.taps, self._tap_sender = create_stream(name="taps")
        self.history: list[str] = []
        self.completed_runs: list[int] = []
        self.finished: Stream | None = None
        self._handle: Disposable | None = None

    def tap(self) -> None:
        """External trigger, e.g. a button press."""
        self._tap_sender.send_next(None)

    def _tap_numbers(self) -> Producer:
        return Producer.from_stream(self.taps).pipe(ops.scan(0, lambda count, _: count + 1))

    def run_step(self, step: Step, run: int) -> Producer:
        """Producer that sends ``run`` once ``step`` has finished, then completes."""

        def start_routine(sender: Sender, token: CancellationToken) -> None:
            self.history.append(f"{run}:{step.name}:start")

            def finish() -> None:
                self.history.append(f"{run}:{step.name}:done")
                sender.send_next(run)
                sender.send_completed()

            token.add(self.scheduler.schedule_after(step.duration, finish))

        return Producer(start_routine, name=step.name)

    def sequence(self) -> Producer:
        """Producer of run numbers, sent when a run's last step finishes."""
        *leading, last = self.steps
        producer = self._tap_numbers()
        for step in leading:
            producer = producer.pipe(
                ops.flat_map(FlattenStrategy.LATEST, partial(self.run_step, step))
            )
        return producer.pipe(
            ops.delay(self.pause, self.scheduler),
            ops.flat_map(FlattenStrategy.LATEST, partial(self.run_step, last)),
        )

    def start(self) -> Stream:
        """Start listening for taps and return the stream of finished runs."""
        if self.finished is None:
            self.finished, self._handle = self.sequence().start()
            self.finished.observe_next(self._on_finished)
        return self.finished

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.dispose()

    def busy(self) -> Producer:
        """Producer of whether a run is in flight, starting with False."""
        finished = self.start()
        taps = _starting_with(0, self._tap_numbers())
        done = _starting_with(0, Producer.from_stream(finished))
        return ops.combine_latest([taps, done]).pipe(
            ops.map(lambda latest: latest[0] != latest[1])
        )

    def _on_finished(self, run: int) -> None:
        _log.info(f"Sequence run {run} finished", extra={"stream": "finished"})
        self.completed_runs.append(run)


async def run_sequencer(taps: int = 1) -> list[str]:
    """Tap ``taps`` times, wait for the last run, and return the step history."""
    sequencer = Sequencer(AsyncioScheduler())
    sequencer.start()
    for _ in range(taps):
        sequencer.tap()
    total = sum(step.duration for step in sequencer.steps) + sequencer.pause
    await asyncio.sleep(total + 0.1)
    sequencer.stop()
    return sequencer.history


def main() -> None:
    """Main entry point for the sequencer demo."""
    configure_logging()
    for entry in asyncio.run(run_sequencer()):
        print(entry)


if __name__ == "__main__":
    main()
