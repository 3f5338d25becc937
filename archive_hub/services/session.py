"""
Fetch/render session: one page, one navigation, closed no matter what.
"""
from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from archive_hub.errors import NavigationError, SaveError, SizeLimitError

logger = logging.getLogger(__name__)


def _parse_length(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def check_declared_size(content_length: int | None, limit: int) -> None:
    if content_length is not None and content_length > limit:
        raise SizeLimitError(f"File size exceeds {_human(limit)}, not saving.")


def check_body_size(body: bytes, limit: int) -> None:
    # content-length can be missing or wrong; the real byte count is authoritative
    if len(body) > limit:
        raise SizeLimitError(f"File size exceeds {_human(limit)}, not saving.")


def _human(limit: int) -> str:
    for unit, size in (("GB", 1 << 30), ("MB", 1 << 20), ("KB", 1 << 10)):
        if limit >= size and limit % size == 0:
            return f"{limit // size}{unit}"
    return f"{limit} bytes"


class FetchSession:
    def __init__(self, browser: Any, url: str, timeout_ms: int = 30000):
        self.browser = browser
        self.url = url
        self.timeout_ms = timeout_ms
        self.page = None
        self.response = None
        self.headers: dict[str, str] = {}

    async def __aenter__(self) -> "FetchSession":
        try:
            self.page = await self.browser.new_page()
        except PlaywrightError as exc:
            raise NavigationError(f"Could not open a browser page: {exc}") from exc
        try:
            await self._navigate()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _navigate(self) -> None:
        try:
            response = await self.page.goto(self.url, wait_until="networkidle", timeout=self.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(f"Timed out loading {self.url}: {exc}") from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Failed to load {self.url}: {exc}") from exc

        if response is None:
            raise NavigationError(f"No response received for {self.url}")
        if not 200 <= response.status < 300:
            raise NavigationError(f"{self.url} responded with HTTP {response.status}")

        self.response = response
        self.headers = {k.lower(): v for k, v in response.headers.items()}

    async def close(self) -> None:
        page, self.page = self.page, None
        if page is None:
            return
        try:
            await page.close()
        except PlaywrightError as exc:
            logger.warning("Closing page for %s failed: %s", self.url, exc)

    @property
    def status(self) -> int:
        return self.response.status

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def content_length(self) -> int | None:
        return _parse_length(self.headers.get("content-length"))

    async def body(self) -> bytes:
        try:
            return await self.response.body()
        except PlaywrightError as exc:
            raise NavigationError(f"Could not read response body: {exc}") from exc

    async def rendered_html(self) -> str:
        try:
            return await self.page.content()
        except PlaywrightError as exc:
            raise SaveError(f"Could not serialize page: {exc}") from exc

    async def pdf(self) -> bytes:
        try:
            return await self.page.pdf(format="A4", print_background=True)
        except PlaywrightError as exc:
            raise SaveError(f"PDF generation failed: {exc}") from exc

    async def screenshot(self) -> bytes:
        try:
            return await self.page.screenshot(full_page=True, type="png")
        except PlaywrightError as exc:
            raise SaveError(f"Screenshot failed: {exc}") from exc
