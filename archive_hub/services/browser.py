"""Process-wide Chromium instance shared by every archive session."""
from __future__ import annotations

import asyncio
import logging

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from archive_hub.config import Settings
from archive_hub.errors import BrowserInitError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/122.0.0.0 Safari/537.36"
)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class BrowserManager:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=True, args=LAUNCH_ARGS)
        except Exception as exc:
            await self._shutdown()
            raise BrowserInitError(f"Could not launch Chromium: {exc}") from exc
        logger.info("Global browser instance launched (Chromium %s)", self._browser.version)

    async def stop(self) -> None:
        await self._shutdown()
        logger.info("Browser stopped")

    async def _shutdown(self) -> None:
        browser, self._browser = self._browser, None
        pw, self._playwright = self._playwright, None
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.warning("Browser close failed: %s", exc)
        if pw is not None:
            await pw.stop()

    def is_healthy(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def restart(self) -> None:
        logger.warning("Restarting browser")
        await self._shutdown()
        await self.start()

    async def new_page(self) -> Page:
        # One restart attempt when Chromium died under us; two callers
        # noticing at once must not both relaunch.
        async with self._lock:
            if not self.is_healthy():
                await self.restart()
            browser = self._browser
        page = await browser.new_page(
            viewport={"width": 1280, "height": 900},
            user_agent=USER_AGENT,
            locale="en-US",
        )
        # Also bounds content(), pdf() and screenshot(), not only goto()
        page.set_default_timeout(self.settings.playwright_timeout_ms)
        return page
