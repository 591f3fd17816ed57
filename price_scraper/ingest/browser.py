"""Process-wide headless browser handle shared by rendered fetches."""

import asyncio
import logging
from typing import Optional

from playwright.async_api import Browser, Playwright, async_playwright

from price_scraper.ingest.stealth_browser import STEALTH_LAUNCH_ARGS

logger = logging.getLogger(__name__)


class BrowserManager:
    """
    Owns one lazily launched Chromium process.

    Pages are opened per call by the fetcher; the browser itself is only
    closed through ``close()`` (or leaving the ``async with`` block).
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._init_lock = asyncio.Lock()

    async def get_browser(self) -> Browser:
        """Return the shared browser, launching it on first use."""
        async with self._init_lock:
            if self._browser is not None and not self._browser.is_connected():
                logger.warning("Browser disconnected, relaunching")
                self._browser = None

            if self._browser is None:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                logger.info("Launching headless browser with stealth args")
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    args=STEALTH_LAUNCH_ARGS,
                )

        return self._browser

    async def close(self):
        """Close browser and stop Playwright."""
        async with self._init_lock:
            if self._browser:
                logger.info("Closing browser")
                try:
                    await self._browser.close()
                except Exception as e:
                    logger.error(f"Error closing browser: {e}")
                self._browser = None

            if self._playwright:
                await self._playwright.stop()
                self._playwright = None

    async def __aenter__(self) -> "BrowserManager":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
