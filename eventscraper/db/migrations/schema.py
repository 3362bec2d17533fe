from __future__ import annotations

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from eventscraper.db.base import Base
from eventscraper.db import models  # noqa: F401
from eventscraper.db.models.event import Event

# Columns added after the first release of the events table.
LEGACY_EVENT_COLUMNS = {
    "address": "TEXT",
}


def _get_columns(conn, table: str) -> set[str]:
    inspector = inspect(conn)
    if not inspector.has_table(table):
        return set()
    return {column["name"] for column in inspector.get_columns(table)}


def ensure_schema(engine: Engine) -> None:
    with engine.begin() as conn:
        event_columns = _get_columns(conn, "events")
        if event_columns:
            for name, ddl_type in LEGACY_EVENT_COLUMNS.items():
                if name not in event_columns:
                    conn.execute(text(f"ALTER TABLE events ADD COLUMN {name} {ddl_type}"))

    Base.metadata.create_all(engine)

    with engine.begin() as conn:
        for index in Event.__table__.indexes:
            index.create(conn, checkfirst=True)
