"""Pytest configuration, Hypothesis profiles and shared helpers."""

import pytest
from hypothesis import settings

from rivulet.core.event import Event, EventKind
from rivulet.schedulers import VirtualTimeScheduler

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=20)

# Load dev profile by default, CI can override via --hypothesis-profile=ci
settings.load_profile("dev")


class Recorder:
    """Observer callback that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def __call__(self, event: Event) -> None:
        self.events.append(event)

    @property
    def values(self) -> list:
        return [e.value for e in self.events if e.kind is EventKind.NEXT]

    @property
    def kinds(self) -> list[EventKind]:
        return [e.kind for e in self.events]

    @property
    def terminals(self) -> list[Event]:
        return [e for e in self.events if e.is_terminal]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_recorder():
    """Factory for tests that need several recorders."""
    return Recorder


@pytest.fixture
def scheduler() -> VirtualTimeScheduler:
    return VirtualTimeScheduler()

