from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from eventscraper.core.urls import absolute_url
from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.fetch.context import FetchContext
from eventscraper.services.sources.base import HttpSource, clean_space

logger = logging.getLogger(__name__)

ECHAI_BASE_URL = "https://echai.ventures"
ECHAI_EVENTS_URL = f"{ECHAI_BASE_URL}/events"


class EChaiSource(HttpSource):
    name = "echai"

    def scrape(self, context: FetchContext) -> list[EventCandidate]:
        html = self.fetch_html(ECHAI_EVENTS_URL, context)
        events = parse_echai_listing(html)
        logger.info("eChai: found %s listings", len(events))
        return events


def parse_echai_listing(html: str, base_url: str = ECHAI_BASE_URL) -> list[EventCandidate]:
    soup = BeautifulSoup(html, "html.parser")
    events: list[EventCandidate] = []
    for container in soup.select("div.position-relative.border-bottom.pb-1"):
        candidate = _parse_container(container, base_url)
        if candidate is not None:
            events.append(candidate)
    return events


def _parse_container(container: Tag, base_url: str) -> EventCandidate | None:
    title_tag = container.select_one("h6.event-title")
    title = clean_space(title_tag.get_text()) if title_tag else ""
    if not title:
        return None

    # data-date="2026-01-01T10:00:00Z"
    date = (container.get("data-date") or "").split("T", 1)[0]

    link = container.select_one("a.stretched-link")
    website = absolute_url(base_url, link.get("href")) if link else ""

    location = ""
    icon = container.select_one("svg.bi-geo")
    if icon is not None and icon.parent is not None:
        location = clean_space(icon.parent.get_text())
    if not location:
        venue = container.select_one("[class*='location'], [class*='venue']")
        location = clean_space(venue.get_text()) if venue else ""

    event_type = "Online" if "online" in f"{location} {title}".lower() else "Offline"

    return EventCandidate(
        name=title,
        date=date,
        location=location,
        website=website,
        event_type=event_type,
        platform="echai",
    )
