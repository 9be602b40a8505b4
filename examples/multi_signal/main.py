#!/usr/bin/env python3
"""
Multi-Stream Structures - Rivulet Demo

Streams derived from one source with filter/map, then the same chain guarded
by attempt so that a forbidden value fails it.

Run:
  python main.py
  python main.py "I have a dog" "Jim has a cat" "Steve has 2 computers"
"""

import argparse
import logging
import sys

from rivulet import operators as ops
from rivulet.core.stream import create_stream

logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)

DEFAULT_LINES = ["I have a dog", "Jim has a cat", "Steve has 2 computers"]


class DogError(Exception):
    """The line mentions a dog."""


def reject_dogs(line: str) -> None:
    if "dog" in line:
        raise DogError(f"line has a dog: {line!r}")


def cat_emoji(lines: list[str]) -> None:
    strings, sender = create_stream(name="strings")
    cat_lines = strings.pipe(
        ops.filter(lambda line: "cat" in line),
        ops.map(lambda line: line.replace("cat", "😺")),
    )

    strings.observe_next(lambda line: print(f"  any:  {line}"))
    cat_lines.observe_next(lambda line: print(f"  cats: {line}"))

    for line in lines:
        sender.send_next(line)
    sender.send_completed()


def guarded_cat_emoji(lines: list[str]) -> None:
    strings, sender = create_stream(name="strings")
    cat_lines = strings.pipe(
        ops.promote_errors(DogError),
        ops.attempt(reject_dogs),
        ops.filter(lambda line: "cat" in line),
        ops.map(lambda line: line.replace("cat", "😺")),
    )

    strings.observe_next(lambda line: print(f"  any:    {line}"))
    cat_lines.observe_next(lambda line: print(f"  cats:   {line}"))
    cat_lines.observe_failed(lambda error: print(f"  failed: {error}"))

    for line in lines:
        sender.send_next(line)
    sender.send_completed()


def main() -> None:
    parser = argparse.ArgumentParser(description="Rivulet multi-stream demo")
    parser.add_argument("lines", nargs="*", default=DEFAULT_LINES)
    args = parser.parse_args()

    print("filter + map:")
    cat_emoji(args.lines)
    print("attempt + filter + map:")
    guarded_cat_emoji(args.lines)


if __name__ == "__main__":
    main()
