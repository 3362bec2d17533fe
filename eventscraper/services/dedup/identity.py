from __future__ import annotations

import hashlib

from eventscraper.core.urls import normalize_identity_url
from eventscraper.domain.schemas.event import EventCandidate

UNKNOWN_LOCATION = "N/A"

_TEXT_FIELDS = (
    "name",
    "location",
    "date_time",
    "date",
    "time",
    "website",
    "description",
    "address",
    "event_type",
    "platform",
)


def normalize_candidate(candidate: EventCandidate) -> EventCandidate:
    values = {field: (getattr(candidate, field) or "").strip() for field in _TEXT_FIELDS}

    if not values["location"]:
        values["location"] = UNKNOWN_LOCATION

    if not values["event_type"]:
        if "online" in values["location"].lower() or "online" in values["address"].lower():
            values["event_type"] = "Online"
        else:
            values["event_type"] = "Offline"

    return EventCandidate(**values)


def is_valid(candidate: EventCandidate) -> bool:
    return bool(candidate.name.strip()) and bool(candidate.platform.strip())


def identity_key(candidate: EventCandidate) -> str:
    # Date is not part of the key: a recurring listing resolves to one row.
    url = normalize_identity_url(candidate.website)
    if url:
        return url
    return f"{candidate.name.strip().lower()}|{candidate.platform.strip().lower()}"


def identity_hash(candidate: EventCandidate) -> str:
    return hashlib.sha256(identity_key(candidate).encode("utf-8")).hexdigest()
