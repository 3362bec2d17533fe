from __future__ import annotations

import asyncio
import logging
from typing import Optional

from playwright.async_api import async_playwright as _async_playwright

from eventscraper.core.env import is_env_flag_enabled
from eventscraper.services.fetch.http_fetcher import BROWSER_HEADERS, sanitize_body

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


def fetch_url_playwright(
    url: str,
    timeout: float = 30.0,
    wait_selector: str | None = None,
    settle_s: float = 1.0,
) -> tuple[str | None, str | None, Optional[int]]:
    """Render ``url`` in headless Chromium and return ``(html, error, status)``.

    When ``wait_selector`` never becomes visible the HTML rendered so far is
    returned instead of an error.
    """

    async def _run() -> tuple[str | None, str | None, Optional[int]]:
        try:
            async with _async_playwright() as p:
                browser = await p.chromium.launch(
                    headless=is_env_flag_enabled("EVENTSCRAPER_BROWSER_HEADLESS", "true"),
                    args=BROWSER_ARGS,
                )
                try:
                    page = await browser.new_page(
                        user_agent=BROWSER_HEADERS["User-Agent"],
                        viewport={"width": 1280, "height": 800},
                    )
                    response = await page.goto(
                        url, wait_until="domcontentloaded", timeout=timeout * 1000
                    )
                    if wait_selector:
                        try:
                            await page.wait_for_selector(
                                wait_selector, state="visible", timeout=timeout * 1000
                            )
                        except Exception as exc:  # noqa: BLE001
                            logger.warning(
                                "Selector %s never appeared url=%s error=%s",
                                wait_selector,
                                url,
                                exc,
                            )
                    await page.wait_for_timeout(settle_s * 1000)
                    content = await page.content()
                    status = response.status if response else None
                finally:
                    await browser.close()
                return sanitize_body(content), None, status
        except Exception as exc:  # noqa: BLE001
            return None, str(exc), None

    return asyncio.run(_run())
