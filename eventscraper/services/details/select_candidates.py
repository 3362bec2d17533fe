from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from eventscraper.db.models.event import Event
from eventscraper.db.models.event_detail import EventDetail
from eventscraper.services.details.types import RefreshCandidate

DEFAULT_STALENESS_DAYS = 7


def select_refresh_candidates(
    session: Session,
    now: datetime,
    staleness_days: int = DEFAULT_STALENESS_DAYS,
    limit: int | None = None,
) -> list[RefreshCandidate]:
    """Events with a usable website whose detail row is missing or stale, newest first."""
    cutoff = now - timedelta(days=staleness_days)
    stmt = (
        select(Event.id, Event.event_name, Event.website, Event.platform, Event.location)
        .outerjoin(EventDetail, EventDetail.event_id == Event.id)
        .where(Event.website.is_not(None))
        .where(Event.website != "")
        .where(Event.website.not_like("%javascript:%"))
        .where(Event.website.not_like("%#%"))
        .where(or_(EventDetail.id.is_(None), EventDetail.last_scraped < cutoff))
        .order_by(Event.created_at.desc(), Event.id.desc())
    )
    if limit:
        stmt = stmt.limit(limit)

    return [
        RefreshCandidate(
            id=row.id,
            name=row.event_name,
            website=row.website,
            platform=row.platform,
            location=row.location,
        )
        for row in session.execute(stmt).all()
    ]
