from __future__ import annotations

from datetime import date, datetime
import re

# Tried in order; the first layout that parses wins.
DATE_LAYOUTS = [
    # ISO 8601
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d",
    # Month name first
    "%B %d, %Y",
    "%b %d, %Y",
    # Day of week prefix
    "%A, %B %d, %Y",
    "%a, %B %d, %Y",
    "%A, %b %d, %Y",
    "%a, %b %d, %Y",
    # Day first
    "%d %b %Y",
    "%d %B %Y",
    # Slash separated
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    # Dash separated, non-ISO
    "%d-%m-%Y",
    "%m-%d-%Y",
    # With time
    "%B %d, %Y %I:%M %p",
    "%b %d, %Y %I:%M %p",
    "%d %b %Y %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
]

_ORDINAL_RE = re.compile(r"(\d)(st|nd|rd|th)\b", re.IGNORECASE)
_RANGE_RE = re.compile(r"\s+[-–]\s+")
_YEAR_RE = re.compile(r"\b(20\d{2})\b")


def clean_date_text(value: str) -> str:
    cleaned = _ORDINAL_RE.sub(r"\1", value.strip())
    cleaned = re.sub(r"\s{2,}", " ", cleaned)

    parts = _RANGE_RE.split(cleaned, maxsplit=1)
    if len(parts) == 2 and parts[0]:
        start, end = parts[0].strip(), parts[1].strip()
        if not _YEAR_RE.search(start):
            years = _YEAR_RE.findall(end)
            if years:
                start = f"{start}, {years[-1]}"
        cleaned = start

    return cleaned.strip()


def parse_date(value: str | None) -> datetime | None:
    if not value or not value.strip():
        return None

    cleaned = clean_date_text(value)
    for layout in DATE_LAYOUTS:
        try:
            return datetime.strptime(cleaned, layout)
        except ValueError:
            continue
    return None


def is_upcoming(value: str | None, today: date | None = None) -> bool:
    """Return True for today or later; unparsable dates are kept."""
    parsed = parse_date(value)
    if parsed is None:
        return True

    today = today or date.today()
    return parsed.date() >= today
