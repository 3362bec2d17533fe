from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventscraper.db.models.event import Event
from eventscraper.db.models.event_detail import EventDetail
from eventscraper.domain.schemas.event import ScrapedDetail

DETAIL_FIELDS = (
    "full_description",
    "organizer",
    "organizer_contact",
    "image_url",
    "tags",
    "price",
    "registration_url",
    "duration",
    "agenda_html",
    "speakers_json",
    "prerequisites",
    "max_attendees",
    "attendees_count",
    "scraped_body",
)


def upsert_event_detail(
    session: Session,
    detail: ScrapedDetail,
    now: datetime | None = None,
) -> bool:
    """Insert or refresh the detail row of one event and commit.

    Returns True when a new row was created. Raises LookupError when the
    event no longer exists.
    """
    now = _as_utc(now or datetime.now(tz=timezone.utc))

    if session.get(Event, detail.event_id) is None:
        raise LookupError(f"event id={detail.event_id} does not exist")

    existing = _find_detail(session, detail.event_id)
    if existing is not None:
        _apply_detail(existing, detail, now)
        session.commit()
        return False

    session.add(
        EventDetail(
            event_id=detail.event_id,
            last_scraped=now,
            created_at=now,
            updated_at=now,
            **{field: getattr(detail, field) for field in DETAIL_FIELDS},
        )
    )
    try:
        session.commit()
    except IntegrityError:
        # Another writer created the row between the check and the insert.
        session.rollback()
        existing = _find_detail(session, detail.event_id)
        if existing is None:
            raise
        _apply_detail(existing, detail, now)
        session.commit()
        return False
    return True


def _find_detail(session: Session, event_id: int) -> EventDetail | None:
    return session.scalar(select(EventDetail).where(EventDetail.event_id == event_id))


def _apply_detail(existing: EventDetail, detail: ScrapedDetail, now: datetime) -> None:
    for field in DETAIL_FIELDS:
        setattr(existing, field, getattr(detail, field))
    existing.last_scraped = _next_scrape_time(existing.last_scraped, now)
    existing.updated_at = now


def _next_scrape_time(previous: datetime | None, now: datetime) -> datetime:
    if previous is None:
        return now
    previous = _as_utc(previous)
    if now <= previous:
        return previous + timedelta(microseconds=1)
    return now


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
