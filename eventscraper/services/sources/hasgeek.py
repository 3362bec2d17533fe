from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from eventscraper.core.urls import absolute_url
from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.fetch.context import FetchContext
from eventscraper.services.sources.base import HttpSource, clean_space

logger = logging.getLogger(__name__)

HASGEEK_URL = "https://hasgeek.com"


class HasGeekSource(HttpSource):
    name = "hasgeek"

    def scrape(self, context: FetchContext) -> list[EventCandidate]:
        html = self.fetch_html(HASGEEK_URL, context)
        events = parse_hasgeek_listing(html)
        logger.info("HasGeek: found %s upcoming listings", len(events))
        return events


def parse_hasgeek_listing(html: str, base_url: str = HASGEEK_URL) -> list[EventCandidate]:
    soup = BeautifulSoup(html, "html.parser")
    events: list[EventCandidate] = []
    # Only the "upcoming" grid; past and featured blocks reuse the card markup.
    for item in soup.select("ul.mui-list--unstyled.grid.upcoming > li[role='listitem']"):
        candidate = _parse_card(item, base_url)
        if candidate is not None:
            events.append(candidate)
    return events


def _parse_card(item: Tag, base_url: str) -> EventCandidate | None:
    link = item.select_one("a.card.card--upcoming")
    if link is None:
        return None

    title = clean_space(link.get("aria-label"))
    if not title:
        tagline = link.select_one(".card__image__tagline")
        title = clean_space(tagline.get_text()) if tagline else ""
    if not title:
        titled = link.select_one("[data-cy-title]")
        title = clean_space(titled.get("data-cy-title")) if titled else ""
    if not title:
        return None

    website = absolute_url(base_url, link.get("href"))
    if not website:
        return None

    # e.g. aria-label="21 Feb 2026, Bangalore"
    date = ""
    location = ""
    meta = link.select_one("div[aria-label]")
    if meta is not None:
        date, _, location = clean_space(meta.get("aria-label")).partition(",")
        date, location = date.strip(), location.strip()

    if not date:
        time_tag = link.find("time")
        date = clean_space(time_tag.get_text()) if time_tag else ""
    if not location:
        venue = link.select_one(".location, .venue, [itemprop='location']")
        location = clean_space(venue.get_text()) if venue else ""

    return EventCandidate(
        name=title,
        location=location,
        date=date,
        website=website,
        platform="hasgeek",
    )
