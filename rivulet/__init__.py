"""Rivulet - Push-based reactive streams for Python."""

from rivulet import operators
from rivulet.core import (
    DEFAULT_CONFIG,
    BranchError,
    CancellationToken,
    CompositeDisposable,
    Disposable,
    Event,
    EventKind,
    LateObserverPolicy,
    ObserverFailureMode,
    Producer,
    RivuletError,
    SchedulerError,
    Sender,
    SerialDisposable,
    Stream,
    StreamConfig,
    StreamFailedError,
    StreamTimeoutError,
    create_stream,
)
from rivulet.core.logging import configure_logging, get_logger
from rivulet.operators import FlattenStrategy, TimeoutPolicy, combine_latest
from rivulet.schedulers import (
    AsyncioScheduler,
    Scheduler,
    ThreadScheduler,
    VirtualTimeScheduler,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "Event",
    "EventKind",
    "Stream",
    "Sender",
    "create_stream",
    "Producer",
    # Lifetime
    "Disposable",
    "CompositeDisposable",
    "SerialDisposable",
    "CancellationToken",
    # Configuration
    "StreamConfig",
    "DEFAULT_CONFIG",
    "LateObserverPolicy",
    "ObserverFailureMode",
    # Errors
    "RivuletError",
    "StreamTimeoutError",
    "StreamFailedError",
    "SchedulerError",
    "BranchError",
    # Operators
    "operators",
    "FlattenStrategy",
    "TimeoutPolicy",
    "combine_latest",
    # Schedulers
    "Scheduler",
    "AsyncioScheduler",
    "ThreadScheduler",
    "VirtualTimeScheduler",
    # Logging
    "configure_logging",
    "get_logger",
    # Meta
    "__version__",
]
