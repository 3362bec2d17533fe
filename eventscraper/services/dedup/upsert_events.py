from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eventscraper.db.models.event import Event
from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.dedup.identity import identity_hash, is_valid, normalize_candidate

logger = logging.getLogger(__name__)

# hash, platform and created_at are never rewritten once a row exists.
MUTABLE_FIELDS = {
    "event_name": "name",
    "location": "location",
    "date_time": "date_time",
    "date": "date",
    "time": "time",
    "website": "website",
    "description": "description",
    "address": "address",
    "event_type": "event_type",
}


@dataclass
class BatchResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0


def upsert_batch(
    session: Session,
    candidates: list[EventCandidate],
    now: datetime | None = None,
) -> BatchResult:
    """Write a batch of candidates in one transaction.

    Each candidate is resolved by identity hash first, then by raw website,
    and only inserted when neither matches. Every row write runs in its own
    SAVEPOINT, so a failing candidate is counted as skipped and the rest of
    the batch still commits.
    """
    result = BatchResult()
    if not candidates:
        return result

    now = now or datetime.now(tz=timezone.utc)

    for raw in candidates:
        candidate = normalize_candidate(raw)
        if not is_valid(candidate):
            logger.info(
                "Skipping candidate reason=missing_name_or_platform item=%s",
                _truncate_item(raw.model_dump()),
            )
            result.skipped += 1
            continue

        event_hash = identity_hash(candidate)
        try:
            with session.begin_nested():
                created = _upsert_one(session, candidate, event_hash, now)
        except SQLAlchemyError as exc:
            logger.warning(
                "Skipping candidate name=%s website=%s reason=write_failed error=%s",
                candidate.name,
                candidate.website,
                exc,
            )
            result.skipped += 1
            continue

        if created:
            result.inserted += 1
        else:
            result.updated += 1

    session.commit()
    return result


def event_stats(session: Session) -> dict[str, int]:
    stats = {"total": session.scalar(select(func.count(Event.id))) or 0}
    rows = session.execute(
        select(Event.platform, func.count(Event.id)).group_by(Event.platform)
    ).all()
    for platform, count in rows:
        stats[platform] = count
    return stats


def _upsert_one(session: Session, candidate: EventCandidate, event_hash: str, now: datetime) -> bool:
    existing = _find_existing(session, event_hash, candidate.website)
    if existing is not None:
        _apply_updates(existing, candidate, now)
        session.flush()
        return False

    event = Event(
        event_name=candidate.name,
        location=candidate.location,
        date_time=candidate.date_time,
        date=candidate.date,
        time=candidate.time,
        website=candidate.website,
        description=candidate.description,
        address=candidate.address,
        event_type=candidate.event_type,
        platform=candidate.platform,
        hash=event_hash,
        created_at=now,
        updated_at=now,
    )
    try:
        with session.begin_nested():
            session.add(event)
            session.flush()
    except IntegrityError:
        # A concurrent writer stored the same identity first.
        existing = _find_existing(session, event_hash, candidate.website)
        if existing is None:
            raise
        _apply_updates(existing, candidate, now)
        session.flush()
        return False

    return True


def _find_existing(session: Session, event_hash: str, website: str) -> Event | None:
    existing = session.scalar(select(Event).where(Event.hash == event_hash))
    if existing is None and website:
        existing = session.scalar(select(Event).where(Event.website == website))
    return existing


def _apply_updates(existing: Event, candidate: EventCandidate, now: datetime) -> None:
    for column, field in MUTABLE_FIELDS.items():
        setattr(existing, column, getattr(candidate, field))
    existing.updated_at = now


def _truncate_item(item: Any, limit: int = 200) -> str:
    text = str(item)
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text
