from datetime import date, datetime

from eventscraper.services.filtering.dates import clean_date_text, is_upcoming, parse_date


def test_parse_date_iso_and_month_name() -> None:
    assert parse_date("2026-03-08") == datetime(2026, 3, 8)
    assert parse_date("2026-03-08T18:30:00") == datetime(2026, 3, 8, 18, 30)
    assert parse_date("March 8, 2026") == datetime(2026, 3, 8)
    assert parse_date("21 Feb 2026") == datetime(2026, 2, 21)


def test_parse_date_strips_ordinals_and_weekday() -> None:
    assert parse_date("Sunday, March 8th, 2026") == datetime(2026, 3, 8)
    assert parse_date("  Mar  1st,  2026 ") == datetime(2026, 3, 1)


def test_parse_date_prefers_month_first_for_slashes() -> None:
    assert parse_date("03/08/2026") == datetime(2026, 3, 8)
    assert parse_date("25/12/2026") == datetime(2026, 12, 25)


def test_clean_date_text_keeps_range_start_with_borrowed_year() -> None:
    assert clean_date_text("Mar 8 - Mar 10, 2026") == "Mar 8, 2026"
    assert parse_date("Mar 8 – Mar 10, 2026") == datetime(2026, 3, 8)


def test_parse_date_returns_none_for_unknown_text() -> None:
    assert parse_date("Daily") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_is_upcoming_boundaries() -> None:
    today = date(2026, 3, 8)
    assert is_upcoming("2026-03-08", today=today) is True
    assert is_upcoming("2026-03-08T00:00:00", today=today) is True
    assert is_upcoming("2026-03-07", today=today) is False
    assert is_upcoming("2026-04-01", today=today) is True


def test_is_upcoming_keeps_unparsable_dates() -> None:
    assert is_upcoming("Every weekend", today=date(2026, 3, 8)) is True
    assert is_upcoming("", today=date(2026, 3, 8)) is True
