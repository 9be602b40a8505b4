"""Stream configuration for Rivulet."""

from enum import Enum

from pydantic import BaseModel


class LateObserverPolicy(Enum):
    """What an observer gets when it attaches to an already-terminated stream.

    REPLAY: The stored terminal event is delivered once, synchronously.
    IGNORE: Nothing is delivered.
    """

    REPLAY = "replay"
    IGNORE = "ignore"


class ObserverFailureMode(Enum):
    """Strategy for exceptions raised by observer callbacks during delivery.

    PROPAGATE: Re-raise to the code that pushed the event.
    LOG: Log the error and keep delivering to the remaining observers.
    """

    PROPAGATE = "propagate"
    LOG = "log"


class StreamConfig(BaseModel):
    """Immutable per-stream settings.

    Attributes:
        late_observer_policy: Behavior of ``observe`` on a terminated stream.
        observer_failure_mode: Behavior when an observer callback raises.
    """

    late_observer_policy: LateObserverPolicy = LateObserverPolicy.REPLAY
    observer_failure_mode: ObserverFailureMode = ObserverFailureMode.PROPAGATE

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }


DEFAULT_CONFIG = StreamConfig()
