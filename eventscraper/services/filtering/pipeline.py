from __future__ import annotations

from datetime import date
import logging

from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.filtering.classify import is_offline_event
from eventscraper.services.filtering.dates import is_upcoming

logger = logging.getLogger(__name__)


def filter_candidates(
    candidates: list[EventCandidate],
    today: date | None = None,
) -> tuple[list[EventCandidate], int]:
    kept: list[EventCandidate] = []
    filtered = 0

    for candidate in candidates:
        if not is_offline_event(candidate.event_type, candidate.location, candidate.name):
            logger.debug("Filtered online event name=%s", candidate.name)
            filtered += 1
            continue

        date_text = candidate.date_time or candidate.date
        if not is_upcoming(date_text, today=today):
            logger.debug("Filtered past event name=%s date=%s", candidate.name, date_text)
            filtered += 1
            continue

        kept.append(candidate)

    return kept, filtered
