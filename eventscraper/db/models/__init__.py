from eventscraper.db.models.event import Event
from eventscraper.db.models.event_detail import EventDetail

__all__ = [
    "Event",
    "EventDetail",
]
