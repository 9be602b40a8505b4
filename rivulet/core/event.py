"""Event model for Rivulet."""

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, model_validator


class EventKind(Enum):
    """Tag of a single occurrence in a stream's lifecycle."""

    NEXT = "next"
    FAILED = "failed"
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


TERMINAL_KINDS = frozenset({EventKind.FAILED, EventKind.COMPLETED, EventKind.INTERRUPTED})


class Event(BaseModel):
    """Immutable, validated stream event.

    Events are the unit of delivery between a Sender and the observers of
    its Stream. They are:
    - Immutable (frozen after creation)
    - Validated (payload fields must match the kind)
    - Tagged (exactly one of NEXT, FAILED, COMPLETED, INTERRUPTED)

    Attributes:
        kind: The event tag.
        value: Payload of a NEXT event. Always None for other kinds.
        error: Payload of a FAILED event. Required for FAILED, None otherwise.
    """

    kind: EventKind
    value: Any = None
    error: Any = None

    model_config = {
        "extra": "forbid",
        "frozen": True,
        "arbitrary_types_allowed": True,
    }

    @model_validator(mode="after")
    def validate_payload(self) -> "Event":
        """Ensure the payload fields agree with the event kind."""
        if self.kind is not EventKind.NEXT and self.value is not None:
            raise ValueError(f"{self.kind.value} event must not carry a value")
        if self.kind is EventKind.FAILED:
            if self.error is None:
                raise ValueError("failed event requires an error")
        elif self.error is not None:
            raise ValueError(f"{self.kind.value} event must not carry an error")
        return self

    @classmethod
    def next(cls, value: Any) -> "Event":
        return cls(kind=EventKind.NEXT, value=value)

    @classmethod
    def failed(cls, error: Any) -> "Event":
        return cls(kind=EventKind.FAILED, error=error)

    @classmethod
    def completed(cls) -> "Event":
        return _COMPLETED

    @classmethod
    def interrupted(cls) -> "Event":
        return _INTERRUPTED

    @property
    def is_terminal(self) -> bool:
        """True for FAILED, COMPLETED and INTERRUPTED."""
        return self.kind in TERMINAL_KINDS

    def map_value(self, fn: Callable[[Any], Any]) -> "Event":
        """Return a NEXT event with fn applied to the value; other kinds unchanged."""
        if self.kind is EventKind.NEXT:
            return Event.next(fn(self.value))
        return self

    def map_error(self, fn: Callable[[Any], Any]) -> "Event":
        """Return a FAILED event with fn applied to the error; other kinds unchanged."""
        if self.kind is EventKind.FAILED:
            return Event.failed(fn(self.error))
        return self

    def __repr__(self) -> str:
        if self.kind is EventKind.NEXT:
            return f"Event.next({self.value!r})"
        if self.kind is EventKind.FAILED:
            return f"Event.failed({self.error!r})"
        return f"Event.{self.kind.value}()"


_COMPLETED = Event(kind=EventKind.COMPLETED)
_INTERRUPTED = Event(kind=EventKind.INTERRUPTED)
