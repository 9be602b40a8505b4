"""Disposables and cancellation tokens.

A Disposable is a revocable handle for one observation or one active start.
All disposables here are idempotent: the first ``dispose()`` does the work,
later calls do nothing.
"""

import threading
from typing import Callable


class Disposable:
    """Runs an optional action exactly once when disposed."""

    def __init__(self, action: Callable[[], None] | None = None) -> None:
        self._action = action
        self._disposed = False
        self._lock = threading.Lock()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            action, self._action = self._action, None
        if action is not None:
            action()

    @classmethod
    def disposed(cls) -> "Disposable":
        """Return a handle that is already disposed."""
        handle = cls()
        handle._disposed = True
        return handle


class CompositeDisposable(Disposable):
    """Owns a group of disposables and disposes them together.

    Adding to a composite that is already disposed disposes the newcomer
    immediately, so late registrations never leak.
    """

    def __init__(self, *disposables: Disposable) -> None:
        super().__init__()
        self._children: list[Disposable] = list(disposables)

    def __len__(self) -> int:
        with self._lock:
            return len(self._children)

    def __bool__(self) -> bool:
        """Always truthy so an empty composite still reads as present."""
        return True

    def add(self, disposable: Disposable) -> Disposable:
        with self._lock:
            if not self._disposed:
                self._children.append(disposable)
                return disposable
        disposable.dispose()
        return disposable

    def remove(self, disposable: Disposable) -> None:
        """Forget a child without disposing it."""
        with self._lock:
            try:
                self._children.remove(disposable)
            except ValueError:
                pass

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            children, self._children = self._children, []
        for child in children:
            child.dispose()


class SerialDisposable(Disposable):
    """Holds a single replaceable inner disposable.

    Assigning a new inner disposes the previous one. Once the serial
    disposable itself is disposed, any later assignment is disposed on
    arrival.
    """

    def __init__(self) -> None:
        super().__init__()
        self._inner: Disposable | None = None

    @property
    def inner(self) -> Disposable | None:
        return self._inner

    @inner.setter
    def inner(self, disposable: Disposable | None) -> None:
        with self._lock:
            if self._disposed:
                previous = disposable
            else:
                previous, self._inner = self._inner, disposable
        if previous is not None:
            previous.dispose()

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            inner, self._inner = self._inner, None
        if inner is not None:
            inner.dispose()


class CancellationToken(CompositeDisposable):
    """Cancellation handle given to a Producer's start routine.

    Cancellation is cooperative: start routines should check
    ``is_cancelled`` before doing more work, and can ``add()`` cleanup
    (timers, tasks, inner subscriptions) that runs when the token is
    cancelled.
    """

    @property
    def is_cancelled(self) -> bool:
        return self._disposed

    def cancel(self) -> None:
        self.dispose()
