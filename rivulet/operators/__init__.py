"""Operators for composing streams and producers.

Typically imported as a namespace::

    from rivulet import operators as ops

    producer.pipe(ops.map(double), ops.filter(is_big))
"""

from rivulet.operators.combine import combine_latest
from rivulet.operators.flatten import (
    FlattenStrategy,
    as_producer,
    flat_map,
    flat_map_error,
    flatten,
    then,
)
from rivulet.operators.timing import TimeoutPolicy, delay, timeout_with_error
from rivulet.operators.transform import (
    attempt,
    attempt_map,
    filter,
    map,
    map_error,
    promote_errors,
    scan,
    tag_errors,
)

__all__ = [
    "map",
    "filter",
    "attempt",
    "attempt_map",
    "promote_errors",
    "map_error",
    "tag_errors",
    "scan",
    "FlattenStrategy",
    "flat_map",
    "flatten",
    "flat_map_error",
    "then",
    "as_producer",
    "combine_latest",
    "TimeoutPolicy",
    "delay",
    "timeout_with_error",
]
