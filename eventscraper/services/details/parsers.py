"""Per-platform detail page parsers.

Every parser receives a :class:`DetailPage` and returns a
:class:`ScrapedDetail`. ``PLATFORM_PARSERS`` maps the stored ``platform`` tag
to its parser; anything unknown goes through :func:`parse_generic`.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import Callable

from bs4 import BeautifulSoup, Tag

from eventscraper.core.urls import absolute_url
from eventscraper.domain.schemas.event import ScrapedDetail
from eventscraper.services.details.sanitize import clean_text, sanitize_html
from eventscraper.services.details.types import RefreshCandidate

logger = logging.getLogger(__name__)

ExternalFetch = Callable[[str], "str | None"]


@dataclass
class DetailPage:
    soup: BeautifulSoup
    event: RefreshCandidate
    fetch_external: ExternalFetch | None = None


DetailParser = Callable[[DetailPage], ScrapedDetail]

GENERIC_SELECTORS = [
    ".event-description",
    ".description",
    ".content",
    "article",
    "[itemprop='description']",
    ".about",
    ".details",
    "main",
    ".event-content",
    ".event-details",
    ".event-info",
]

_MEETUP_PRICE_RE = re.compile(r"charges?:\s*Rs\.?\s*(\d+)", re.IGNORECASE)
_MEETUP_CONTACT_RE = re.compile(r"contact\s*us?:\s*(\d{10})", re.IGNORECASE)


def first_html(soup: Tag, selectors: list[str], min_length: int) -> str:
    for selector in selectors:
        found = soup.select_one(selector)
        if found is None:
            continue
        inner = found.decode_contents()
        if len(inner.strip()) > min_length:
            return sanitize_html(inner)
    return ""


def first_text(soup: Tag, selector: str) -> str:
    found = soup.select_one(selector)
    return clean_text(found.get_text()) if found else ""


def first_attr(soup: Tag, selector: str, attr: str) -> str | None:
    found = soup.select_one(selector)
    if found is None:
        return None
    value = found.get(attr)
    return value if isinstance(value, str) else None


def og_image(soup: Tag) -> str:
    return first_attr(soup, "meta[property='og:image']", "content") or ""


def parse_allevents(page: DetailPage) -> ScrapedDetail:
    soup, event = page.soup, page.event
    detail = ScrapedDetail(
        event_id=event.id,
        full_description=first_html(
            soup,
            [".event-description-html", ".event-description", ".description-content", ".about-event"],
            50,
        ),
        image_url=og_image(soup),
        organizer=first_text(soup, ".organizer-name, .event-organizer, [itemprop='organizer']"),
    )

    register = first_attr(soup, "a.register-button, a.book-ticket, a[href*='register']", "href")
    detail.registration_url = absolute_url(event.website, register) if register else event.website

    tags = [
        clean_text(tag.get_text())
        for tag in soup.select(".event-tags a, .tag, .category-tag")
    ]
    tags = [tag for tag in tags if tag and len(tag) < 50]
    if tags:
        detail.tags = ", ".join(tags)
    return detail


def parse_hasgeek(page: DetailPage) -> ScrapedDetail:
    soup = page.soup
    return ScrapedDetail(
        event_id=page.event.id,
        full_description=first_html(soup, [".markdown", ".event__description", "article.markdown"], 50),
        image_url=og_image(soup),
        organizer=first_text(soup, ".profile__fullname, .organizer"),
        registration_url=page.event.website,
    )


def parse_meetup(page: DetailPage) -> ScrapedDetail:
    soup = page.soup
    detail = ScrapedDetail(
        event_id=page.event.id,
        full_description=first_html(
            soup,
            [".w-full.break-words", "[data-event-label='event-description']", ".event-description", ".description"],
            50,
        ),
        image_url=og_image(soup),
        organizer=first_text(soup, ".groupName, .organizer-name"),
        registration_url=page.event.website,
    )

    body = soup.select_one(".w-full.break-words")
    plain = body.get_text() if body else ""
    price = _MEETUP_PRICE_RE.search(plain)
    if price:
        detail.price = f"₹{price.group(1)}"
    contact = _MEETUP_CONTACT_RE.search(plain)
    if contact:
        detail.organizer_contact = contact.group(1)
    return detail


def parse_echai(page: DetailPage) -> ScrapedDetail:
    soup = page.soup
    description = first_html(
        soup,
        [".event_short_description .trix-content", ".event_short_description"],
        20,
    ) or first_html(soup, ["article"], 100)

    if not description:
        for selector in ("meta[property='og:description']", "meta[name='description']"):
            meta = (first_attr(soup, selector, "content") or "").strip()
            if meta:
                description = f"<p>{meta}</p>"
                break

    if not description:
        logger.warning("eChai: no description found event_id=%s", page.event.id)

    return ScrapedDetail(
        event_id=page.event.id,
        full_description=description,
        image_url=og_image(soup),
        organizer="eChai Ventures",
        registration_url=page.event.website,
    )


def parse_biec(page: DetailPage) -> ScrapedDetail:
    soup = page.soup
    parts = []
    for selector, heading in ((".eve-detail", "Event Details"), (".eve-venue", "Venue")):
        marker = soup.select_one(selector)
        section = marker.parent if marker is not None else None
        if section is not None and len(clean_text(section.get_text())) > 10:
            parts.append(f"<h3>{heading}</h3>{sanitize_html(section.decode_contents())}")

    detail = ScrapedDetail(
        event_id=page.event.id,
        full_description="\n".join(parts),
        image_url=og_image(soup),
        registration_url=page.event.website,
    )

    org_marker = soup.select_one(".eve-org")
    org_section = org_marker.parent if org_marker is not None else None
    if org_section is not None:
        detail.organizer = first_text(org_section, "p b")
        email = first_attr(org_section, "a[href^='mailto:']", "href")
        if email:
            detail.organizer_contact = email.removeprefix("mailto:")
    if not detail.organizer:
        detail.organizer = "BIEC - Bangalore International Exhibition Centre"
    return detail


def parse_hitex(page: DetailPage) -> ScrapedDetail:
    """HITEX pages link out to the organizer's own site for the description."""
    soup = page.soup
    detail = ScrapedDetail(
        event_id=page.event.id,
        organizer="HITEX - Hyderabad International Trade Expositions",
        registration_url=page.event.website,
        image_url=og_image(soup),
    )

    external_url = ""
    for button in soup.select("a.btn"):
        href = button.get("href")
        if "website" in button.get_text().strip().lower() and isinstance(href, str) and href.startswith("http"):
            external_url = href

    if not external_url or page.fetch_external is None:
        detail.full_description = first_html(soup, [".event-description", ".content", "article", "main"], 100)
        return detail

    logger.info("HITEX: following external url=%s", external_url)
    detail.external_url = external_url
    external_html = page.fetch_external(external_url)
    if external_html is None:
        return detail

    external = BeautifulSoup(external_html, "html.parser")
    detail.full_description = first_html(
        external,
        [
            "section.section",
            ".about-event",
            "[class*='about']",
            ".event-description",
            ".event-content",
            "article",
            "main",
        ],
        100,
    )
    if not detail.full_description:
        paragraphs = [p.get_text().strip() for p in external.find_all("p")]
        detail.full_description = "\n".join(f"<p>{text}</p>" for text in paragraphs if len(text) > 50)
    if not detail.image_url:
        detail.image_url = og_image(external)
    return detail


def parse_townscript(page: DetailPage) -> ScrapedDetail:
    soup, event = page.soup, page.event
    image = og_image(soup)
    if not image:
        banner = first_attr(soup, ".event-image img, .banner img", "src")
        image = absolute_url(event.website, banner) if banner else ""
    return ScrapedDetail(
        event_id=event.id,
        full_description=first_html(soup, [".event-description-text", ".description-content"], 50),
        image_url=image,
        organizer=first_text(soup, ".organizer-info, .organizer-name, .host"),
        registration_url=event.website,
    )


def parse_generic(page: DetailPage) -> ScrapedDetail:
    soup = page.soup
    return ScrapedDetail(
        event_id=page.event.id,
        full_description=first_html(soup, GENERIC_SELECTORS, 100),
        image_url=og_image(soup),
        organizer=first_text(soup, ".organizer, .author, [itemprop='organizer']"),
        registration_url=page.event.website,
    )


PLATFORM_PARSERS: dict[str, DetailParser] = {
    "allevents": parse_allevents,
    "hasgeek": parse_hasgeek,
    "meetup": parse_meetup,
    "townscript": parse_townscript,
    "biec": parse_biec,
    "hitex": parse_hitex,
    "echai": parse_echai,
}


def parser_for(platform: str | None) -> DetailParser:
    return PLATFORM_PARSERS.get((platform or "").strip().lower(), parse_generic)


def parse_detail(
    html: str,
    event: RefreshCandidate,
    fetch_external: ExternalFetch | None = None,
) -> ScrapedDetail:
    soup = BeautifulSoup(html, "html.parser")
    page = DetailPage(soup=soup, event=event, fetch_external=fetch_external)
    return parser_for(event.platform)(page)
