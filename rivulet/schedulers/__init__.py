"""Scheduler implementations for time-based operators."""

from rivulet.schedulers.base import Scheduler
from rivulet.schedulers.event_loop import AsyncioScheduler
from rivulet.schedulers.threaded import ThreadScheduler
from rivulet.schedulers.virtual import VirtualTimeScheduler

__all__ = ["Scheduler", "AsyncioScheduler", "ThreadScheduler", "VirtualTimeScheduler"]
