from datetime import datetime, timezone

from eventscraper.config import Settings
from eventscraper.core.env import is_env_flag_enabled, load_env
from eventscraper.db.base import Base
from eventscraper.db.models.event import Event
from eventscraper.db.session import create_db_engine, make_session_factory
from eventscraper.scripts.refresh_details import build_refresher, run_refresh_cycle
from eventscraper.scripts.run_scheduler import build_parser
from eventscraper.services.details.refresh import DetailRefresher


def _factory():
    engine = create_db_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    return make_session_factory(engine)


def test_load_env_does_not_fail_when_missing() -> None:
    load_env()


def test_env_flag_parsing(monkeypatch) -> None:
    monkeypatch.setenv("EVENTSCRAPER_TEST_FLAG", "Yes")
    assert is_env_flag_enabled("EVENTSCRAPER_TEST_FLAG") is True
    monkeypatch.setenv("EVENTSCRAPER_TEST_FLAG", "off")
    assert is_env_flag_enabled("EVENTSCRAPER_TEST_FLAG") is False
    assert is_env_flag_enabled("EVENTSCRAPER_UNSET_FLAG", "true") is True


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("SCRAPER_INTERVAL_MINUTES", "5")
    monkeypatch.setenv("ONLINE_MARKERS", '["zoom"]')

    config = Settings()

    assert config.SCRAPER_INTERVAL_MINUTES == 5
    assert config.ONLINE_MARKERS == ["zoom"]
    assert config.DETAIL_STALENESS_DAYS == 7


def test_build_refresher_uses_settings() -> None:
    config = Settings(DETAIL_MIN_DELAY_SECONDS=1, DETAIL_MAX_DELAY_SECONDS=2, DETAIL_STALENESS_DAYS=3)

    refresher = build_refresher(config)

    assert (refresher.min_delay_s, refresher.max_delay_s) == (1.0, 2.0)
    assert refresher.staleness_days == 3


def test_crawl_parser_flags() -> None:
    args = build_parser().parse_args(["--once", "--interval", "2"])
    assert args.once is True
    assert args.interval == 2.0


def test_run_refresh_cycle_prints_summary(capsys) -> None:
    factory = _factory()
    with factory() as session:
        now = datetime.now(tz=timezone.utc)
        session.add(
            Event(
                event_name="Meetup",
                website="https://x.org/1",
                platform="meetup",
                hash="h1",
                created_at=now,
                updated_at=now,
            )
        )
        session.commit()

    def fetcher(url, **kwargs):
        return "<html><body><p>hello</p></body></html>", None, 200

    refresher = DetailRefresher(fetcher=fetcher, browser_fetcher=fetcher, sleep_fn=lambda _: None)
    stats = run_refresh_cycle(factory, refresher, timeout_s=60)

    out = capsys.readouterr().out
    assert stats["inserted"] == 1
    assert "DETAIL REFRESH COMPLETE" in out
    assert "New details: 1" in out
    assert "Events in database: 1" in out
    assert "picked up next cycle" not in out


def test_run_refresh_cycle_mentions_remaining_events(capsys) -> None:
    factory = _factory()
    with factory() as session:
        now = datetime.now(tz=timezone.utc)
        session.add_all(
            [
                Event(event_name=f"E{i}", website=f"https://x.org/{i}", platform="meetup", hash=f"h{i}",
                      created_at=now, updated_at=now)
                for i in range(2)
            ]
        )
        session.commit()

    def fetcher(url, **kwargs):
        return "<html></html>", None, 200

    refresher = DetailRefresher(fetcher=fetcher, browser_fetcher=fetcher, sleep_fn=lambda _: None)
    stats = run_refresh_cycle(factory, refresher, timeout_s=0)

    assert stats["deadline_exceeded"] is True
    assert "remaining events will be picked up next cycle" in capsys.readouterr().out
