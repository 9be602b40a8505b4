"""Tests for scheduler implementations."""

import asyncio
import threading
import time

import pytest

from rivulet.core.errors import SchedulerError
from rivulet.schedulers import AsyncioScheduler, ThreadScheduler, VirtualTimeScheduler


class TestVirtualTimeScheduler:
    def test_runs_actions_in_due_order(self, scheduler):
        calls = []
        scheduler.schedule_after(2.0, lambda: calls.append("late"))
        scheduler.schedule_after(1.0, lambda: calls.append("early"))

        scheduler.advance(3.0)

        assert calls == ["early", "late"]
        assert scheduler.now() == 3.0

    def test_same_instant_keeps_scheduling_order(self, scheduler):
        calls = []
        for name in ("a", "b", "c"):
            scheduler.schedule_after(1.0, lambda name=name: calls.append(name))
        scheduler.advance(1.0)
        assert calls == ["a", "b", "c"]

    def test_nothing_runs_before_advance(self, scheduler):
        calls = []
        scheduler.schedule_now(lambda: calls.append("now"))
        assert calls == []
        assert scheduler.pending == 1

        scheduler.advance()
        assert calls == ["now"]

    def test_clock_reads_due_time_inside_action(self, scheduler):
        seen = []
        scheduler.schedule_after(1.5, lambda: seen.append(scheduler.now()))
        scheduler.advance(10.0)
        assert seen == [1.5]

    def test_cancelled_action_never_runs(self, scheduler):
        calls = []
        handle = scheduler.schedule_after(1.0, lambda: calls.append("cancelled"))
        handle.dispose()

        scheduler.run()

        assert calls == []
        assert scheduler.pending == 0

    def test_actions_scheduled_while_advancing(self, scheduler):
        calls = []

        def first():
            calls.append(("first", scheduler.now()))
            scheduler.schedule_after(1.0, lambda: calls.append(("second", scheduler.now())))

        scheduler.schedule_after(1.0, first)
        scheduler.advance(5.0)

        assert calls == [("first", 1.0), ("second", 2.0)]

    def test_run_drains_everything(self, scheduler):
        calls = []
        scheduler.schedule_after(7.0, lambda: calls.append(7))
        scheduler.schedule_after(3.0, lambda: calls.append(3))
        scheduler.run()
        assert calls == [3, 7]
        assert scheduler.now() == 7.0

    def test_custom_start_time(self):
        assert VirtualTimeScheduler(start=100.0).now() == 100.0


class TestAsyncioScheduler:
    async def test_schedule_after_runs_on_loop(self):
        scheduler = AsyncioScheduler()
        done = asyncio.Event()
        scheduler.schedule_after(0.01, done.set)
        await asyncio.wait_for(done.wait(), timeout=1.0)

    async def test_cancel_before_due(self):
        scheduler = AsyncioScheduler()
        calls = []
        handle = scheduler.schedule_after(0.05, lambda: calls.append("ran"))
        handle.dispose()
        await asyncio.sleep(0.1)
        assert calls == []

    async def test_schedule_now(self):
        scheduler = AsyncioScheduler()
        calls = []
        scheduler.schedule_now(lambda: calls.append("ran"))
        await asyncio.sleep(0)
        assert calls == ["ran"]

    async def test_schedule_from_other_thread(self):
        loop = asyncio.get_running_loop()
        scheduler = AsyncioScheduler(loop)
        done = asyncio.Event()
        loop_thread = threading.current_thread()
        threads = []

        def action():
            threads.append(threading.current_thread())
            done.set()

        worker = threading.Thread(target=lambda: scheduler.schedule_after(0.01, action))
        worker.start()
        worker.join()
        await asyncio.wait_for(done.wait(), timeout=1.0)

        assert threads == [loop_thread]

    def test_requires_running_loop(self):
        with pytest.raises(SchedulerError):
            AsyncioScheduler().schedule_now(lambda: None)


class TestThreadScheduler:
    def test_runs_action_on_worker_thread(self):
        scheduler = ThreadScheduler(name="worker")
        done = threading.Event()
        threads = []

        def action():
            threads.append(threading.current_thread().name)
            done.set()

        scheduler.schedule_after(0.01, action)
        assert done.wait(timeout=2.0)
        assert threads == ["worker"]

    def test_same_interval_runs_in_scheduling_order(self):
        scheduler = ThreadScheduler()
        calls = []
        done = threading.Event()
        for value in range(100):
            scheduler.schedule_after(0.01, lambda value=value: calls.append(value))
        scheduler.schedule_after(0.01, done.set)

        assert done.wait(timeout=5.0)
        assert calls == list(range(100))

    def test_earlier_due_runs_first(self):
        scheduler = ThreadScheduler()
        calls = []
        done = threading.Event()

        def late():
            calls.append("late")
            done.set()

        scheduler.schedule_after(0.1, late)
        scheduler.schedule_after(0.01, lambda: calls.append("early"))

        assert done.wait(timeout=5.0)
        assert calls == ["early", "late"]

    def test_actions_never_overlap(self):
        scheduler = ThreadScheduler()
        lock = threading.Lock()
        overlaps = []
        done = threading.Event()

        def action():
            if not lock.acquire(blocking=False):
                overlaps.append(True)
                return
            try:
                time.sleep(0.005)
            finally:
                lock.release()

        for _ in range(10):
            scheduler.schedule_after(0.0, action)
        scheduler.schedule_after(0.0, done.set)

        assert done.wait(timeout=5.0)
        assert overlaps == []

    def test_failing_action_does_not_stop_worker(self):
        scheduler = ThreadScheduler()
        done = threading.Event()

        def explode():
            raise RuntimeError("action broke")

        scheduler.schedule_now(explode)
        scheduler.schedule_now(done.set)
        assert done.wait(timeout=2.0)

    def test_cancel_before_due(self):
        scheduler = ThreadScheduler()
        ran = threading.Event()
        handle = scheduler.schedule_after(0.2, ran.set)
        handle.dispose()
        assert not ran.wait(timeout=0.4)

    def test_now_is_monotonic(self):
        scheduler = ThreadScheduler()
        first = scheduler.now()
        assert scheduler.now() >= first
