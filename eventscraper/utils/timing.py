from __future__ import annotations

import time
from typing import Callable


def format_duration(seconds: float) -> str:
    total = int(round(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes or hours:
        parts.append(f"{minutes}m")
    parts.append(f"{secs}s")
    return "".join(parts)


class Timer:
    """Context manager measuring wall time; ``elapsed`` is live while inside the block."""

    def __init__(self, time_fn: Callable[[], float] = time.monotonic) -> None:
        self._time_fn = time_fn
        self._start: float | None = None
        self._stop: float | None = None

    def __enter__(self) -> "Timer":
        self._start = self._time_fn()
        self._stop = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._stop = self._time_fn()

    @property
    def elapsed(self) -> float:
        if self._start is None:
            return 0.0
        end = self._stop if self._stop is not None else self._time_fn()
        return end - self._start
