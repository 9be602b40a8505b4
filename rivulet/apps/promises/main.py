"""Promise-style chaining demo.

Each step is an asynchronous producer that sends one value and completes.
``flat_map(LATEST)`` chains them so the pipeline reads top to bottom:

    get_int -> get_string -> get_sentence

Usage:
    python -m rivulet.apps.promises.main
"""

import asyncio

from rivulet import operators as ops
from rivulet.core.disposable import CancellationToken
from rivulet.core.logging import configure_logging
from rivulet.core.producer import Producer
from rivulet.core.stream import Sender
from rivulet.interop import collect
from rivulet.operators import FlattenStrategy
from rivulet.schedulers import AsyncioScheduler, Scheduler

STEP_DELAY = 0.5


def _after(delay: float, scheduler: Scheduler, value: object, name: str) -> Producer:
    """Producer that sends ``value`` and completes after ``delay``."""

    def start_routine(sender: Sender, token: CancellationToken) -> None:
        def deliver() -> None:
            if token.is_cancelled:
                return
            sender.send_next(value)
            sender.send_completed()

        token.add(scheduler.schedule_after(delay, deliver))

    return Producer(start_routine, name=name)


def get_int(value: int, scheduler: Scheduler) -> Producer:
    return _after(STEP_DELAY, scheduler, value, "get_int")


def get_string(value: int, scheduler: Scheduler) -> Producer:
    return _after(STEP_DELAY, scheduler, str(value), "get_string")


def get_sentence(text: str, scheduler: Scheduler) -> Producer:
    return _after(
        STEP_DELAY,
        scheduler,
        f"We have successfully received the string: {text}",
        "get_sentence",
    )


def sentence_from_int(value: int, scheduler: Scheduler) -> Producer:
    """get an int, then its string, then a sentence about that string."""
    return get_int(value, scheduler).pipe(
        ops.flat_map(FlattenStrategy.LATEST, lambda n: get_string(n, scheduler)),
        ops.flat_map(FlattenStrategy.LATEST, lambda s: get_sentence(s, scheduler)),
    )


def shouted_length_sentence(value: int, scheduler: Scheduler) -> Producer:
    """Chain mixing asynchronous steps with synchronous ``map`` stages."""
    return sentence_from_int(value, scheduler).pipe(
        ops.map(len),
        ops.flat_map(FlattenStrategy.LATEST, lambda n: get_string(n, scheduler)),
        ops.flat_map(FlattenStrategy.LATEST, lambda s: get_sentence(s, scheduler)),
        ops.map(str.upper),
    )


async def run_promises(value: int = 5) -> tuple[list[str], list[str]]:
    """Run both chains concurrently on the running event loop."""
    scheduler = AsyncioScheduler()
    sentences, shouted = await asyncio.gather(
        collect(sentence_from_int(value, scheduler)),
        collect(shouted_length_sentence(value, scheduler)),
    )
    return sentences, shouted


def main() -> None:
    """Main entry point for the promises demo."""
    configure_logging()
    sentences, shouted = asyncio.run(run_promises())
    for sentence in sentences:
        print(f"sentence_from_int: {sentence}")
    for sentence in shouted:
        print(f"shouted_length_sentence: {sentence}")


if __name__ == "__main__":
    main()
