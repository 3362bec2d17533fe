from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from sqlalchemy.exc import SQLAlchemyError

from eventscraper.config import Settings, settings
from eventscraper.core.env import load_env
from eventscraper.db.migrations.schema import ensure_schema
from eventscraper.db.session import SessionLocal, engine
from eventscraper.logging import configure_logging
from eventscraper.services.dedup.upsert_events import event_stats
from eventscraper.services.details.refresh import DetailRefresher, run_detail_refresh
from eventscraper.services.fetch.context import FetchContext
from eventscraper.utils.timing import Timer, format_duration

logger = logging.getLogger(__name__)


def build_refresher(config: Settings) -> DetailRefresher:
    return DetailRefresher(
        fetch_timeout=float(config.DETAIL_FETCH_TIMEOUT_SECONDS),
        retries=config.MAX_RETRIES,
        min_delay_s=float(config.DETAIL_MIN_DELAY_SECONDS),
        max_delay_s=float(config.DETAIL_MAX_DELAY_SECONDS),
        external_delay_s=float(config.RATE_LIMIT_DELAY_SECONDS),
        staleness_days=config.DETAIL_STALENESS_DAYS,
    )


def run_refresh_cycle(
    session_factory,
    refresher: DetailRefresher,
    timeout_s: float | None,
    cancel_event: threading.Event | None = None,
    limit: int | None = None,
) -> dict[str, int | bool]:
    context = FetchContext.with_timeout(timeout_s, cancel_event=cancel_event)
    session = session_factory()
    try:
        with Timer() as timer:
            stats = run_detail_refresh(session, refresher, limit=limit, context=context)
        totals = event_stats(session)
    finally:
        session.close()

    print("=" * 60)
    print("DETAIL REFRESH COMPLETE")
    print(f"Duration: {format_duration(timer.elapsed)}")
    print(f"Candidates: {stats['candidates']}")
    print(f"Reached: {stats['reached']}")
    print(f"New details: {stats['inserted']}")
    print(f"Updated details: {stats['updated']}")
    print(f"Failed: {stats['failed']}")
    print(f"Events in database: {totals['total']}")
    if stats["deadline_exceeded"]:
        print("Run stopped early; remaining events will be picked up next cycle.")
    print("=" * 60)
    return stats


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Refresh event detail pages on a fixed interval.")
    parser.add_argument("--limit", type=int, default=None, help="Max events per cycle")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    load_env()
    configure_logging("DEBUG" if args.verbose else None)
    try:
        ensure_schema(engine)
    except SQLAlchemyError as exc:
        print(f"Database unavailable: {exc}", file=sys.stderr)
        sys.exit(1)

    shutdown = threading.Event()

    def _handle(signum, frame) -> None:
        logger.info("Received signal %s, finishing current item", signal.Signals(signum).name)
        shutdown.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)

    refresher = build_refresher(settings)
    timeout_s = settings.DETAIL_RUN_TIMEOUT_MINUTES * 60
    interval_s = settings.DETAIL_INTERVAL_MINUTES * 60
    cycle = 0
    while not shutdown.is_set():
        cycle += 1
        logger.info("Detail refresh cycle #%s started", cycle)
        run_refresh_cycle(SessionLocal, refresher, timeout_s, cancel_event=shutdown, limit=args.limit)
        if args.once:
            break
        logger.info("Next detail refresh in %s", format_duration(interval_s))
        shutdown.wait(interval_s)


if __name__ == "__main__":
    main()
