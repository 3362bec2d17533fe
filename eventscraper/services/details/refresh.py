from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import random
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eventscraper.domain.schemas.event import ScrapedDetail
from eventscraper.services.dedup.upsert_details import upsert_event_detail
from eventscraper.services.details.parsers import parse_detail
from eventscraper.services.details.sanitize import truncate
from eventscraper.services.details.select_candidates import (
    DEFAULT_STALENESS_DAYS,
    select_refresh_candidates,
)
from eventscraper.services.details.types import RefreshCandidate
from eventscraper.services.fetch.context import FetchContext
from eventscraper.services.fetch.http_fetcher import fetch_url_text
from eventscraper.services.fetch.playwright_fetcher import fetch_url_playwright

logger = logging.getLogger(__name__)

# Platforms that need a rendered page, with the selector that marks it ready.
BROWSER_PLATFORMS = {
    "echai": ".event_short_description",
}


class DetailFetchError(RuntimeError):
    pass


@dataclass
class RefreshResult:
    candidates: int = 0
    reached: int = 0
    scraped: int = 0
    saved: int = 0
    failed: int = 0
    deadline_exceeded: bool = False


class DetailRefresher:
    """Walks refresh candidates one at a time and hands each parsed page to a callback.

    Fetches are sequential with a random pause between them. A failing page is
    logged and counted; the loop moves on. The run stops between items once
    the context is cancelled or past its deadline and reports that through
    ``RefreshResult.deadline_exceeded`` instead of raising.
    """

    def __init__(
        self,
        fetcher: Callable[..., tuple[str | None, str | None, int | None]] = fetch_url_text,
        browser_fetcher: Callable[..., tuple[str | None, str | None, int | None]] = fetch_url_playwright,
        fetch_timeout: float = 30.0,
        retries: int = 1,
        min_delay_s: float = 3.0,
        max_delay_s: float = 7.0,
        external_delay_s: float = 2.0,
        staleness_days: int = DEFAULT_STALENESS_DAYS,
        sleep_fn: Callable[[float], None] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.browser_fetcher = browser_fetcher
        self.fetch_timeout = fetch_timeout
        self.retries = retries
        self.min_delay_s = min_delay_s
        self.max_delay_s = max_delay_s
        self.external_delay_s = external_delay_s
        self.staleness_days = staleness_days
        self.sleep_fn = sleep_fn
        self.rng = rng or random.Random()

    def refresh(
        self,
        session: Session,
        on_item_saved: Callable[[ScrapedDetail], None],
        limit: int | None = None,
        context: FetchContext | None = None,
        now: datetime | None = None,
    ) -> RefreshResult:
        context = context or FetchContext()
        now = now or datetime.now(tz=timezone.utc)

        candidates = select_refresh_candidates(
            session, now, staleness_days=self.staleness_days, limit=limit
        )
        result = RefreshResult(candidates=len(candidates))
        if not candidates:
            logger.info("No events need a detail refresh")
            return result

        logger.info("Found %s events needing a detail refresh", len(candidates))
        for index, event in enumerate(candidates):
            if context.done() or (index > 0 and self._pause(context)):
                result.deadline_exceeded = True
                logger.warning(
                    "Detail refresh stopped after %s/%s events; remainder left for next cycle",
                    index,
                    len(candidates),
                )
                break

            result.reached = index + 1
            logger.info(
                "[%s/%s] %s url=%s platform=%s",
                index + 1,
                len(candidates),
                event.name,
                event.website,
                event.platform,
            )

            try:
                detail = self.scrape_event(event, context)
            except Exception as exc:  # noqa: BLE001
                result.failed += 1
                logger.warning("Detail scrape failed event_id=%s: %s", event.id, exc)
                continue
            result.scraped += 1

            try:
                on_item_saved(detail)
            except Exception as exc:  # noqa: BLE001
                result.failed += 1
                logger.error("Saving detail failed event_id=%s: %s", event.id, exc, exc_info=True)
                continue
            result.saved += 1

            if (index + 1) % 10 == 0:
                logger.info(
                    "Progress %s/%s scraped=%s saved=%s failed=%s",
                    index + 1,
                    len(candidates),
                    result.scraped,
                    result.saved,
                    result.failed,
                )

        return result

    def scrape_event(self, event: RefreshCandidate, context: FetchContext) -> ScrapedDetail:
        if not event.website:
            raise DetailFetchError("empty website URL")

        timeout = context.bounded(self.fetch_timeout)
        platform = (event.platform or "").strip().lower()
        if platform in BROWSER_PLATFORMS:
            html, error, status = self.browser_fetcher(
                event.website,
                timeout=timeout,
                wait_selector=BROWSER_PLATFORMS[platform],
            )
        else:
            html, error, status = self.fetcher(
                event.website,
                timeout=timeout,
                retries=self.retries,
                context=context,
            )
        if html is None:
            raise DetailFetchError(f"fetch failed status={status} error={error}")

        logger.debug("Fetched %s bytes from %s", len(html), event.website)
        detail = parse_detail(
            html,
            event,
            fetch_external=lambda url: self._fetch_external(url, context),
        )
        if detail.external_url:
            logger.info(
                "Description for event_id=%s read from external url=%s",
                event.id,
                detail.external_url,
            )
        detail.scraped_body = truncate(html)
        return detail

    def _pause(self, context: FetchContext) -> bool:
        delay = self.rng.uniform(self.min_delay_s, self.max_delay_s)
        logger.debug("Waiting %.1fs before next fetch", delay)
        if self.sleep_fn is not None:
            self.sleep_fn(delay)
            return context.done()
        return context.wait(delay)

    def _fetch_external(self, url: str, context: FetchContext) -> str | None:
        if context.wait(self.external_delay_s):
            return None
        html, error, _ = self.fetcher(
            url,
            timeout=context.bounded(self.fetch_timeout),
            retries=self.retries,
            context=context,
        )
        if html is None:
            logger.warning("External fetch failed url=%s error=%s", url, error)
        return html


def run_detail_refresh(
    session: Session,
    refresher: DetailRefresher,
    limit: int | None = None,
    context: FetchContext | None = None,
    now: datetime | None = None,
) -> dict[str, int | bool]:
    """Refresh details and persist each one as soon as it is parsed."""
    stats = {"inserted": 0, "updated": 0}

    def _save(detail: ScrapedDetail) -> None:
        try:
            is_new = upsert_event_detail(session, detail)
        except (SQLAlchemyError, LookupError):
            session.rollback()
            raise
        if is_new:
            stats["inserted"] += 1
            logger.info(
                "NEW event_id=%s desc=%s chars organizer=%s",
                detail.event_id,
                len(detail.full_description),
                detail.organizer,
            )
        else:
            stats["updated"] += 1
            logger.info("UPD event_id=%s desc=%s chars", detail.event_id, len(detail.full_description))

    result = refresher.refresh(session, _save, limit=limit, context=context, now=now)
    logger.info(
        "Detail refresh done candidates=%s reached=%s inserted=%s updated=%s failed=%s deadline_exceeded=%s",
        result.candidates,
        result.reached,
        stats["inserted"],
        stats["updated"],
        result.failed,
        result.deadline_exceeded,
    )
    return {
        "candidates": result.candidates,
        "reached": result.reached,
        "inserted": stats["inserted"],
        "updated": stats["updated"],
        "failed": result.failed,
        "deadline_exceeded": result.deadline_exceeded,
    }
