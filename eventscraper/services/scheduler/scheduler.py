from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import date
import logging
import threading
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.dedup.upsert_events import upsert_batch
from eventscraper.services.fetch.context import FetchContext
from eventscraper.services.filtering.pipeline import filter_candidates
from eventscraper.services.scheduler.report import CycleReport, ScraperStatus
from eventscraper.services.sources.base import SourceAdapter
from eventscraper.utils.heartbeat import start_heartbeat
from eventscraper.utils.timing import Timer

logger = logging.getLogger(__name__)


def scrape_with_timeout(
    adapter: SourceAdapter,
    context: FetchContext,
    timeout_s: float | None,
) -> list[EventCandidate]:
    """Run ``adapter.scrape`` on a worker thread bounded by ``timeout_s``.

    On timeout the adapter's context is cancelled and the worker is abandoned;
    it stops at its next checkpoint.
    """
    child = context.child(timeout_s)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"source-{adapter.name}")
    try:
        future = executor.submit(adapter.scrape, child)
        try:
            return future.result(timeout=child.remaining())
        except FuturesTimeoutError:
            child.cancel()
            raise TimeoutError(f"{adapter.name} timed out") from None
    finally:
        executor.shutdown(wait=False)


def run_source(
    session: Session,
    adapter: SourceAdapter,
    context: FetchContext,
    timeout_s: float | None = None,
    today: date | None = None,
) -> ScraperStatus:
    name = adapter.name
    with Timer() as timer:
        try:
            candidates = scrape_with_timeout(adapter, context, timeout_s)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Source failed source=%s: %s",
                name,
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            return ScraperStatus(name=name, error=str(exc), duration_s=timer.elapsed)

        clean, filtered = filter_candidates(candidates, today=today)
        status = ScraperStatus(name=name, success=True, filtered=filtered)
        if clean:
            try:
                result = upsert_batch(session, clean)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error("Batch upsert failed source=%s: %s", name, exc, exc_info=True)
                return ScraperStatus(name=name, error=str(exc), filtered=filtered, duration_s=timer.elapsed)
            status.inserted = result.inserted
            status.updated = result.updated
            if result.skipped:
                logger.info("Skipped %s invalid candidates from source=%s", result.skipped, name)

    status.duration_s = timer.elapsed
    logger.info(
        "Source done source=%s found=%s inserted=%s updated=%s filtered=%s",
        name,
        len(candidates),
        status.inserted,
        status.updated,
        status.filtered,
    )
    return status


class CrawlScheduler:
    """Runs every source adapter once per cycle, on a fixed interval.

    At most one cycle runs at a time: a trigger that arrives while a cycle is
    in flight is dropped, not queued.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        sources: list[SourceAdapter],
        interval_minutes: float = 10,
        adapter_timeout_s: float | None = 300.0,
        cycle_timeout_s: float | None = None,
        heartbeat_interval_s: float | None = 60.0,
    ) -> None:
        self.session_factory = session_factory
        self.sources = list(sources)
        self.interval_s = interval_minutes * 60
        self.adapter_timeout_s = adapter_timeout_s
        self.cycle_timeout_s = cycle_timeout_s
        self.heartbeat_interval_s = heartbeat_interval_s

        self._lock = threading.Lock()
        self._running = False
        self._loop_count = 0
        self._stop_event = threading.Event()
        self._timer_thread: threading.Thread | None = None
        self._cycle_thread: threading.Thread | None = None

    @property
    def loop_count(self) -> int:
        with self._lock:
            return self._loop_count

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def start(self) -> None:
        if self._timer_thread is not None and self._timer_thread.is_alive():
            logger.warning("Crawl scheduler already started")
            return
        logger.info(
            "Starting crawl scheduler interval_minutes=%s sources=%s filter=upcoming+offline",
            self.interval_s / 60,
            len(self.sources),
        )
        self._stop_event.clear()
        self._timer_thread = threading.Thread(
            target=self._tick_loop,
            name="crawl-scheduler",
            daemon=True,
        )
        self._timer_thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        for thread in (self._timer_thread, self._cycle_thread):
            if thread is not None and thread is not threading.current_thread():
                thread.join(timeout)
        logger.info("Crawl scheduler stopped after %s cycles", self.loop_count)

    def _tick_loop(self) -> None:
        while not self._stop_event.is_set():
            self._trigger()
            if self._stop_event.wait(self.interval_s):
                break

    def _trigger(self) -> None:
        thread = threading.Thread(target=self.run_cycle, name="crawl-cycle", daemon=True)
        thread.start()
        if self._cycle_thread is None or not self._cycle_thread.is_alive():
            self._cycle_thread = thread

    def run_cycle(self) -> CycleReport | None:
        with self._lock:
            if self._running:
                logger.warning("Skipping cycle, previous cycle still running")
                return None
            self._running = True
            self._loop_count += 1
            loop = self._loop_count

        try:
            return self._execute_cycle(loop)
        finally:
            with self._lock:
                self._running = False

    def _execute_cycle(self, loop: int) -> CycleReport:
        report = CycleReport(loop=loop)
        context = FetchContext.with_timeout(self.cycle_timeout_s, cancel_event=self._stop_event)
        current = {"source": "", "index": 0}
        logger.info("Crawl cycle #%s started sources=%s", loop, len(self.sources))

        stop_heartbeat = start_heartbeat(
            f"crawl-cycle-{loop}",
            interval_s=self.heartbeat_interval_s,
            logger=logger,
            progress_fn=lambda: f"source={current['source']} {current['index']}/{len(self.sources)}",
        )
        session = self.session_factory()
        try:
            with Timer() as timer:
                for index, adapter in enumerate(self.sources, start=1):
                    if context.done():
                        report.cancelled = True
                        logger.warning(
                            "Cycle #%s stopped before source=%s (%s/%s)",
                            loop,
                            adapter.name,
                            index - 1,
                            len(self.sources),
                        )
                        break
                    current["source"], current["index"] = adapter.name, index
                    report.add(run_source(session, adapter, context, self.adapter_timeout_s))
        finally:
            session.close()
            stop_heartbeat()

        report.duration_s = timer.elapsed
        report.log_summary(logger)
        return report
