from __future__ import annotations

from collections.abc import Iterable

from eventscraper.config import settings


def contains_marker(text: str, markers: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(marker.lower() in lowered for marker in markers)


def is_offline_event(
    event_type: str | None,
    location: str | None,
    title: str | None,
    markers: Iterable[str] | None = None,
) -> bool:
    combined = " ".join([event_type or "", location or "", title or ""])
    return not contains_marker(combined, markers if markers is not None else settings.ONLINE_MARKERS)


def is_learning_listing(title: str | None, markers: Iterable[str] | None = None) -> bool:
    return contains_marker(title or "", markers if markers is not None else settings.LEARNING_MARKERS)
