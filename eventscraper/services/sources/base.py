from __future__ import annotations

from typing import Callable, Protocol

from eventscraper.domain.schemas.event import EventCandidate
from eventscraper.services.fetch.context import FetchContext
from eventscraper.services.fetch.http_fetcher import fetch_url_text

Fetcher = Callable[..., tuple[str | None, str | None, int | None]]


class SourceAdapter(Protocol):
    @property
    def name(self) -> str:
        ...

    def scrape(self, context: FetchContext) -> list[EventCandidate]:
        ...


class SourceFetchError(RuntimeError):
    pass


class HttpSource:
    """Shared fetch plumbing for listing adapters that read plain HTML."""

    name = "base"

    def __init__(
        self,
        timeout: float = 120.0,
        retries: int = 3,
        fetcher: Fetcher = fetch_url_text,
    ) -> None:
        self.timeout = timeout
        self.retries = retries
        self.fetcher = fetcher

    def fetch_html(self, url: str, context: FetchContext) -> str:
        text, error, status = self.fetcher(
            url,
            timeout=self.timeout,
            retries=self.retries,
            context=context,
        )
        if text is None:
            raise SourceFetchError(f"{self.name}: fetch failed url={url} status={status} error={error}")
        return text


def clean_space(value: str | None) -> str:
    return " ".join((value or "").replace("\u00a0", " ").split())

