import pytest

from eventscraper.services.fetch.context import FetchContext
from eventscraper.services.sources.base import SourceFetchError
from eventscraper.services.sources.echai import parse_echai_listing
from eventscraper.services.sources.hasgeek import HasGeekSource, parse_hasgeek_listing
from eventscraper.services.sources.registry import build_sources
from eventscraper.services.sources.townscript import TownscriptSource, parse_townscript_listing

HASGEEK_HTML = """
<ul class="mui-list--unstyled grid upcoming">
  <li role="listitem">
    <a class="card card--upcoming" href="/pycon/2026" aria-label="PyCon India 2026">
      <div aria-label="21 Feb 2026, Bangalore"></div>
    </a>
  </li>
  <li role="listitem"><span>no link</span></li>
</ul>
<ul class="mui-list--unstyled grid past">
  <li role="listitem"><a class="card card--upcoming" href="/old" aria-label="Old"></a></li>
</ul>
"""

ECHAI_HTML = """
<div class="position-relative border-bottom pb-1" data-date="2026-04-01T10:00:00Z">
  <h6 class="event-title">Founders Chai</h6>
  <a class="stretched-link" href="/events/42"></a>
  <span><svg class="bi-geo"></svg> Ahmedabad </span>
</div>
<div class="position-relative border-bottom pb-1" data-date="2026-04-02T10:00:00Z">
  <h6 class="event-title">AMA</h6>
  <span><svg class="bi-geo"></svg> Online </span>
</div>
"""


def _townscript_page(*titles: str) -> str:
    cards = "".join(
        f"""
        <div class="ls-card"><a href="/e/{title.lower().replace(' ', '-')}">
          <div class="event-name">{title}</div>
          <div class="secondary-details"><span class="date">Mar 20, 2026</span>
          <span class="location">Pune</span></div>
        </a></div>
        """
        for title in titles
    )
    padding = "<!-- " + "listing " * 200 + "-->"
    return f"<html><body>{cards}{padding}</body></html>"


def test_parse_hasgeek_listing_reads_upcoming_grid_only() -> None:
    events = parse_hasgeek_listing(HASGEEK_HTML)

    assert len(events) == 1
    assert events[0].name == "PyCon India 2026"
    assert events[0].website == "https://hasgeek.com/pycon/2026"
    assert events[0].date == "21 Feb 2026"
    assert events[0].location == "Bangalore"
    assert events[0].platform == "hasgeek"


def test_parse_echai_listing_sets_event_type() -> None:
    events = parse_echai_listing(ECHAI_HTML)

    assert [e.name for e in events] == ["Founders Chai", "AMA"]
    assert events[0].date == "2026-04-01"
    assert events[0].website == "https://echai.ventures/events/42"
    assert events[0].location == "Ahmedabad"
    assert events[0].event_type == "Offline"
    assert events[1].event_type == "Online"
    assert events[1].website == ""


def test_parse_townscript_listing_skips_learning_and_seen() -> None:
    seen = {"https://www.townscript.com/e/devops-days"}
    html = _townscript_page("DevOps Days", "Rust Meetup", "Python Bootcamp")

    events = parse_townscript_listing(html, seen)

    assert [e.name for e in events] == ["Rust Meetup"]
    assert events[0].location == "Pune"
    assert events[0].date == "Mar 20, 2026"
    assert "https://www.townscript.com/e/rust-meetup" in seen


def test_townscript_source_pages_until_two_empty_pages() -> None:
    pages = {1: _townscript_page("Rust Meetup"), 2: _townscript_page("Go Night")}
    requested: list[str] = []

    def fetcher(url, timeout=None, retries=None, context=None):
        requested.append(url)
        page = int(url.rsplit("=", 1)[1])
        return pages.get(page, _townscript_page()), None, 200

    def browser(url, timeout=None):
        raise AssertionError("browser fallback not expected")

    source = TownscriptSource(fetcher=fetcher, browser_fetcher=browser, max_pages=10)
    context = FetchContext()
    context.wait = lambda seconds: False

    events = source.scrape(context)

    assert [e.name for e in events] == ["Rust Meetup", "Go Night"]
    assert len(requested) == 4


def test_townscript_source_falls_back_to_browser_for_thin_html() -> None:
    browser_calls: list[str] = []

    def fetcher(url, timeout=None, retries=None, context=None):
        return "<html></html>", None, 200

    def browser(url, timeout=None):
        browser_calls.append(url)
        return _townscript_page("Rendered Event") if len(browser_calls) == 1 else "", None, 200

    source = TownscriptSource(fetcher=fetcher, browser_fetcher=browser, max_pages=3)
    context = FetchContext()
    context.wait = lambda seconds: False

    events = source.scrape(context)

    assert [e.name for e in events] == ["Rendered Event"]
    assert len(browser_calls) == 3


def test_http_source_raises_on_fetch_failure() -> None:
    def fetcher(url, timeout=None, retries=None, context=None):
        return None, "failed after 3 attempts: boom", None

    source = HasGeekSource(fetcher=fetcher)

    with pytest.raises(SourceFetchError):
        source.scrape(FetchContext())


def test_build_sources_order() -> None:
    assert [source.name for source in build_sources()] == ["hasgeek", "townscript", "echai"]
