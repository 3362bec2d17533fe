from datetime import date

from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.filtering.classify import is_learning_listing, is_offline_event
from eventscraper.services.filtering.pipeline import filter_candidates


def test_is_offline_event_detects_online_markers() -> None:
    assert is_offline_event("Offline", "Bangalore", "Python Meetup") is True
    assert is_offline_event("", "Online", "Python Meetup") is False
    assert is_offline_event("", "Bangalore", "Cloud WEBINAR series") is False
    assert is_offline_event("Virtual", "", "Meetup") is False


def test_is_offline_event_defaults_to_offline_without_signal() -> None:
    assert is_offline_event(None, None, None) is True


def test_markers_are_overridable() -> None:
    assert is_offline_event("", "Hybrid hall", "Talk", markers=["hybrid"]) is False
    assert is_learning_listing("Data Science Bootcamp") is True
    assert is_learning_listing("PyCon India") is False


def test_filter_candidates_counts_online_and_past() -> None:
    today = date(2026, 3, 8)
    candidates = [
        EventCandidate(name="Kept", date="2026-03-08", platform="hasgeek"),
        EventCandidate(name="Past", date="2026-03-01", platform="hasgeek"),
        EventCandidate(name="Remote", location="Online", date="2026-04-01", platform="echai"),
        EventCandidate(name="No date", date="TBA", platform="townscript"),
        EventCandidate(name="Timed", date_time="2026-02-01", date="2026-05-01", platform="x"),
    ]

    kept, filtered = filter_candidates(candidates, today=today)

    assert [c.name for c in kept] == ["Kept", "No date"]
    assert filtered == 3
