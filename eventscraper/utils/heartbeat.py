from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from eventscraper.utils.timing import format_duration


def start_heartbeat(
    step_label: str,
    interval_s: float | None = 60.0,
    logger: logging.Logger | None = None,
    time_fn: Callable[[], float] = time.monotonic,
    progress_fn: Callable[[], str] | None = None,
) -> Callable[[], None]:
    """Log a periodic "still running" line until the returned stop function is called."""
    log = logger or logging.getLogger(__name__)
    if interval_s is None or log.isEnabledFor(logging.DEBUG):
        return lambda: None

    stop_event = threading.Event()
    start_time = time_fn()

    def _run() -> None:
        while not stop_event.wait(interval_s):
            elapsed = format_duration(time_fn() - start_time)
            progress = progress_fn() if progress_fn is not None else ""
            if progress:
                log.info("...still running step=%s elapsed=%s %s", step_label, elapsed, progress)
            else:
                log.info("...still running step=%s elapsed=%s", step_label, elapsed)

    thread = threading.Thread(target=_run, name=f"heartbeat-{step_label}", daemon=True)
    thread.start()

    def stop() -> None:
        stop_event.set()
        thread.join()

    return stop
