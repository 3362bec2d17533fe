from __future__ import annotations

import threading
import time
from typing import Callable


class FetchContext:
    """Cancellation signal plus an optional deadline shared down a call chain.

    A child context inherits the parent's cancel event and takes the tighter
    of the two deadlines.
    """

    def __init__(
        self,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
        parent: FetchContext | None = None,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> None:
        self.deadline = deadline
        self._cancel_event = cancel_event or threading.Event()
        self._parent = parent
        self._time_fn = time_fn

    @classmethod
    def with_timeout(
        cls,
        timeout_s: float | None,
        cancel_event: threading.Event | None = None,
        time_fn: Callable[[], float] = time.monotonic,
    ) -> FetchContext:
        deadline = time_fn() + timeout_s if timeout_s is not None else None
        return cls(deadline=deadline, cancel_event=cancel_event, time_fn=time_fn)

    def child(self, timeout_s: float | None) -> FetchContext:
        deadline = self.deadline
        if timeout_s is not None:
            candidate = self._time_fn() + timeout_s
            deadline = candidate if deadline is None else min(deadline, candidate)
        return FetchContext(deadline=deadline, parent=self, time_fn=self._time_fn)

    def cancel(self) -> None:
        self._cancel_event.set()

    def cancelled(self) -> bool:
        if self._cancel_event.is_set():
            return True
        return self._parent.cancelled() if self._parent is not None else False

    def deadline_exceeded(self) -> bool:
        return self.deadline is not None and self._time_fn() >= self.deadline

    def done(self) -> bool:
        return self.cancelled() or self.deadline_exceeded()

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._time_fn())

    def bounded(self, timeout_s: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return timeout_s
        return min(timeout_s, remaining)

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True if the context finished meanwhile."""
        seconds = self.bounded(seconds)
        step = 0.5
        end = self._time_fn() + seconds
        while not self.done():
            left = end - self._time_fn()
            if left <= 0:
                break
            self._cancel_event.wait(min(step, left))
        return self.done()
