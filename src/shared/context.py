"""
Cancellation contexts.

A Context is a cancellation token that may carry a deadline. Contexts form a
tree: a child is done when it is cancelled, when its own deadline passes or
when its parent is done, whichever happens first. Cancelling is idempotent and
never blocks waiting for listeners to react.
"""

import threading
import time
from typing import Callable, List, Optional

from shared.logging import get_logger

logger = get_logger(__name__)


class ContextError(Exception):
    """Reason a context is done."""
    pass


class Canceled(ContextError):
    """The context was cancelled explicitly."""
    pass


class DeadlineReached(ContextError):
    """The context's deadline passed."""
    pass


DoneCallback = Callable[["Context"], None]


class Context:
    """Cancellation token with an optional monotonic deadline."""

    def __init__(self, parent: Optional["Context"] = None, deadline: Optional[float] = None):
        """
        Args:
            parent: Parent context, or None for a root context
            deadline: Absolute time.monotonic() value, or None
        """
        self._parent = parent
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._err: Optional[ContextError] = None
        self._callbacks: List[DoneCallback] = []
        self._timer: Optional[threading.Timer] = None

        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline

        if parent is not None:
            parent.on_done(self._propagate)

        if deadline is not None and not self._event.is_set():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._finish(DeadlineReached("context deadline exceeded"))
            else:
                self._timer = threading.Timer(remaining, self._expire)
                self._timer.daemon = True
                self._timer.start()

    @classmethod
    def background(cls) -> "Context":
        """A root context that is never done unless cancelled."""
        return cls()

    def with_cancel(self) -> "Context":
        """Child context cancelled by cancel() or by this context."""
        return Context(parent=self)

    def with_deadline(self, deadline: float) -> "Context":
        """Child context that is done at the given monotonic time."""
        return Context(parent=self, deadline=deadline)

    def with_timeout(self, seconds: float) -> "Context":
        """Child context that is done after the given number of seconds."""
        return self.with_deadline(time.monotonic() + seconds)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel this context and its children. Safe to call repeatedly."""
        self._finish(Canceled("context canceled"))

    def err(self) -> Optional[ContextError]:
        """Why the context is done, or None while it is still live."""
        self._check_deadline()
        with self._lock:
            return self._err

    def done(self) -> bool:
        return self.err() is not None

    def deadline_exceeded(self) -> bool:
        return isinstance(self.err(), DeadlineReached)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the context is done or timeout elapses. Returns done()."""
        self._event.wait(timeout)
        return self.done()

    def on_done(self, callback: DoneCallback) -> None:
        """
        Register a callback run once when the context is done.

        Runs immediately in the calling thread if the context is already done,
        otherwise in whichever thread finishes the context.
        """
        with self._lock:
            if self._err is None:
                self._callbacks.append(callback)
                return
        callback(self)

    def remove_callback(self, callback: DoneCallback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._finish(DeadlineReached("context deadline exceeded"))

    def _expire(self) -> None:
        self._finish(DeadlineReached("context deadline exceeded"))

    def _propagate(self, parent: "Context") -> None:
        self._finish(parent.err() or Canceled("context canceled"))

    def _finish(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            callbacks, self._callbacks = self._callbacks, []
            self._event.set()

        if self._timer is not None:
            self._timer.cancel()
        if self._parent is not None:
            self._parent.remove_callback(self._propagate)

        for callback in callbacks:
            try:
                callback(self)
            except Exception:
                logger.exception("Context done callback failed")
