"""Core components for the Rivulet reactive stream library.

This module exposes the primary types, constants, and utilities:

Types:
    Event: Immutable, validated stream event (NEXT, FAILED, COMPLETED, INTERRUPTED).
    EventKind: Enum of event tags.
    Stream: Hot, multicast, push-based channel of Events.
    Sender: Write side of a Stream.
    Producer: Cold factory that creates a new Stream on each start.

Lifetime:
    Disposable: Idempotent revocable handle.
    CompositeDisposable: Group of disposables disposed together.
    SerialDisposable: Single replaceable inner disposable.
    CancellationToken: Cooperative cancellation passed to start routines.

Configuration:
    StreamConfig: Immutable per-stream settings.
    LateObserverPolicy: Enum for observers of terminated streams (REPLAY, IGNORE).
    ObserverFailureMode: Enum for observer exceptions (PROPAGATE, LOG).

Errors:
    RivuletError: Base of the library's own exceptions.
    StreamTimeoutError: Default timeout failure.
    StreamFailedError: Non-exception failure surfaced by async iteration.
    SchedulerError: Scheduling was not possible.
    BranchError: Branch-tagged error for unifying error kinds.
"""

from rivulet.core.config import (
    DEFAULT_CONFIG,
    LateObserverPolicy,
    ObserverFailureMode,
    StreamConfig,
)
from rivulet.core.disposable import (
    CancellationToken,
    CompositeDisposable,
    Disposable,
    SerialDisposable,
)
from rivulet.core.errors import (
    BranchError,
    RivuletError,
    SchedulerError,
    StreamFailedError,
    StreamTimeoutError,
)
from rivulet.core.event import Event, EventKind
from rivulet.core.producer import Producer
from rivulet.core.stream import Sender, Stream, create_stream

__all__ = [
    "Event",
    "EventKind",
    "Stream",
    "Sender",
    "create_stream",
    "Producer",
    "Disposable",
    "CompositeDisposable",
    "SerialDisposable",
    "CancellationToken",
    "StreamConfig",
    "DEFAULT_CONFIG",
    "LateObserverPolicy",
    "ObserverFailureMode",
    "RivuletError",
    "StreamTimeoutError",
    "StreamFailedError",
    "SchedulerError",
    "BranchError",
]
