from __future__ import annotations

import logging
import time
from typing import Callable

import httpx

from eventscraper.services.fetch.context import FetchContext

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def fetch_url_text(
    url: str,
    timeout: float = 10.0,
    retries: int = 1,
    backoff_s: float = 2.0,
    context: FetchContext | None = None,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> tuple[str | None, str | None, int | None]:
    """GET ``url`` and return ``(text, error, status)``.

    Timeouts, transport failures and non-200 responses are retried up to
    ``retries`` attempts, waiting ``attempt * backoff_s`` between them.
    """
    attempts = max(1, retries)
    error: str | None = None
    status: int | None = None

    for attempt in range(1, attempts + 1):
        if context is not None and context.done():
            return None, error or "cancelled", status

        request_timeout = context.bounded(timeout) if context is not None else timeout
        try:
            with httpx.Client(
                headers=BROWSER_HEADERS,
                timeout=request_timeout,
                follow_redirects=True,
            ) as client:
                response = client.get(url)
                response.raise_for_status()
                if response.status_code == 200:
                    return sanitize_body(response.text), None, response.status_code
                status = response.status_code
                error = f"HTTP {response.status_code} from {url}"
        except httpx.HTTPStatusError as exc:
            resp = exc.response
            status = resp.status_code if resp is not None else None
            error = str(exc)
        except httpx.HTTPError as exc:
            status = None
            error = str(exc)

        if attempt < attempts:
            logger.debug("Retrying url=%s attempt=%s error=%s", url, attempt, error)
            sleep_fn(attempt * backoff_s)

    return None, f"failed after {attempts} attempts: {error}", status


def sanitize_body(text: str) -> str:
    """Drop NUL bytes and unencodable characters that text columns reject."""
    cleaned = text.replace("\x00", "")
    return cleaned.encode("utf-8", errors="ignore").decode("utf-8", errors="ignore")
