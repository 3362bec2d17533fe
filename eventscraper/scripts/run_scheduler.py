from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from sqlalchemy.exc import SQLAlchemyError

from eventscraper.config import settings
from eventscraper.core.env import load_env
from eventscraper.db.migrations.schema import ensure_schema
from eventscraper.db.session import SessionLocal, engine
from eventscraper.logging import configure_logging
from eventscraper.services.scheduler.scheduler import CrawlScheduler
from eventscraper.services.sources.registry import build_sources

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crawl all listing sources on a fixed interval.")
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Minutes between cycles (default: SCRAPER_INTERVAL_MINUTES)",
    )
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def install_signal_handlers(shutdown: threading.Event) -> None:
    def _handle(signum, frame) -> None:
        logger.info("Received signal %s, shutting down", signal.Signals(signum).name)
        shutdown.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


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

    interval = args.interval if args.interval is not None else settings.SCRAPER_INTERVAL_MINUTES
    scheduler = CrawlScheduler(
        SessionLocal,
        build_sources(settings),
        interval_minutes=interval,
        adapter_timeout_s=float(settings.ADAPTER_TIMEOUT_SECONDS),
    )

    if args.once:
        report = scheduler.run_cycle()
        if report is not None:
            print("\n".join(report.summary_lines()))
        return

    shutdown = threading.Event()
    install_signal_handlers(shutdown)
    scheduler.start()
    while not shutdown.wait(1.0):
        pass
    scheduler.stop(timeout=30.0)
    print(f"Scheduler stopped after {scheduler.loop_count} cycles")


if __name__ == "__main__":
    main()
