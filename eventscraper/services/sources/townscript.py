from __future__ import annotations

import logging
from typing import Callable

from bs4 import BeautifulSoup, Tag

from eventscraper.core.urls import absolute_url
from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.fetch.context import FetchContext
from eventscraper.services.fetch.http_fetcher import fetch_url_text
from eventscraper.services.fetch.playwright_fetcher import fetch_url_playwright
from eventscraper.services.filtering.classify import is_learning_listing
from eventscraper.services.sources.base import Fetcher, HttpSource, SourceFetchError, clean_space

logger = logging.getLogger(__name__)

TOWNSCRIPT_BASE_URL = "https://www.townscript.com"
TOWNSCRIPT_LISTING_URL = f"{TOWNSCRIPT_BASE_URL}/in/india/tech?page={{page}}"
MAX_PAGES = 25
MAX_EMPTY_PAGES = 2
MIN_HTML_SIZE = 1200
POLITE_DELAY_S = 0.7


class TownscriptSource(HttpSource):
    """Paged Angular listing; falls back to a browser render when SSR is thin."""

    name = "townscript"

    def __init__(
        self,
        timeout: float = 120.0,
        retries: int = 3,
        fetcher: Fetcher = fetch_url_text,
        browser_fetcher: Callable[..., tuple[str | None, str | None, int | None]] = fetch_url_playwright,
        max_pages: int = MAX_PAGES,
    ) -> None:
        super().__init__(timeout=timeout, retries=retries, fetcher=fetcher)
        self.browser_fetcher = browser_fetcher
        self.max_pages = max_pages

    def scrape(self, context: FetchContext) -> list[EventCandidate]:
        events: list[EventCandidate] = []
        seen: set[str] = set()
        empty_streak = 0

        for page in range(1, self.max_pages + 1):
            if context.done():
                logger.warning("Townscript: stopped at page=%s, context finished", page)
                break

            url = TOWNSCRIPT_LISTING_URL.format(page=page)
            try:
                page_events = parse_townscript_listing(self._fetch_page(url, context), seen)
            except SourceFetchError as exc:
                logger.warning("Townscript page=%s error=%s", page, exc)
                page_events = []

            if page_events:
                empty_streak = 0
                events.extend(page_events)
            else:
                empty_streak += 1
                if empty_streak >= MAX_EMPTY_PAGES:
                    break

            context.wait(POLITE_DELAY_S)

        logger.info("Townscript: found %s listings", len(events))
        return events

    def _fetch_page(self, url: str, context: FetchContext) -> str:
        try:
            html = self.fetch_html(url, context)
        except SourceFetchError:
            html = ""
        if len(html.strip()) >= MIN_HTML_SIZE:
            return html

        text, error, _ = self.browser_fetcher(url, timeout=context.bounded(self.timeout))
        if text is None:
            raise SourceFetchError(f"townscript: browser fetch failed url={url} error={error}")
        return text


def parse_townscript_listing(html: str, seen: set[str] | None = None) -> list[EventCandidate]:
    seen = seen if seen is not None else set()
    soup = BeautifulSoup(html, "html.parser")
    events: list[EventCandidate] = []

    for link in soup.select("div.ls-card a[href^='/e/']"):
        candidate = _parse_card(link, link, seen)
        if candidate is not None:
            events.append(candidate)

    if not events:
        for card in soup.find_all("ts-listings-event-card"):
            link = card.find_parent("a", href=True) or card.find("a", href=True)
            if link is None:
                continue
            candidate = _parse_card(card, link, seen)
            if candidate is not None:
                events.append(candidate)

    return events


def _parse_card(card: Tag, link: Tag, seen: set[str]) -> EventCandidate | None:
    website = absolute_url(TOWNSCRIPT_BASE_URL, link.get("href"))
    if not website or website in seen:
        return None

    title = _first_text(card, ".event-name") or _first_text(card, "div.event-name-box")
    if len(title) < 3 or is_learning_listing(title):
        return None

    seen.add(website)
    return EventCandidate(
        name=title,
        location=_first_text(card, ".secondary-details .location"),
        # "Daily" marks recurring listings; the date filter keeps unparsable text.
        date=_first_text(card, ".secondary-details .date"),
        website=website,
        platform="townscript",
    )


def _first_text(root: Tag, selector: str) -> str:
    found = root.select_one(selector)
    return clean_space(found.get_text()) if found else ""
