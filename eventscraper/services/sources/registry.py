from __future__ import annotations

from eventscraper.config import Settings, settings as default_settings
from eventscraper.services.sources.base import SourceAdapter
from eventscraper.services.sources.echai import EChaiSource
from eventscraper.services.sources.hasgeek import HasGeekSource
from eventscraper.services.sources.townscript import TownscriptSource


def build_sources(config: Settings | None = None) -> list[SourceAdapter]:
    """The fixed crawl set, in the order a cycle visits it."""
    config = config or default_settings
    timeout = float(config.SCRAPER_TIMEOUT_SECONDS)
    retries = config.MAX_RETRIES
    return [
        HasGeekSource(timeout=timeout, retries=retries),
        TownscriptSource(timeout=timeout, retries=retries),
        EChaiSource(timeout=timeout, retries=retries),
    ]
