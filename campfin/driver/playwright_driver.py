"""Playwright implementation of the browser collaborator.

Wraps a single Playwright ``Page`` so the pipeline can drive the portal
through ``BrowserSession``. Key points:

- One browser, one context, one page per run
- Downloads run through ``fetch`` inside the page so the portal sees the
  session cookies it issued with the document key
- Playwright timeouts on optional waits are reported as absence, never
  raised
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Frame,
    Locator,
    Page,
    async_playwright,
)
from playwright.async_api import (
    TimeoutError as PlaywrightTimeoutError,
)

from campfin.common.exceptions import CollaboratorUnavailableException

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from campfin.driver.browser import ContentFrame, GridRow

logger = logging.getLogger(__name__)

# Runs inside the page. Bytes are returned as a plain list so they survive
# Playwright's JSON serialization.
_FETCH_BYTES_JS = """
async (url) => {
    const response = await fetch(url);
    const blob = await response.blob();
    const buffer = await blob.arrayBuffer();
    return Array.from(new Uint8Array(buffer));
}
"""


class PlaywrightFrame:
    """``ContentFrame`` backed by a Playwright frame."""

    def __init__(self, frame: Frame) -> None:
        self._frame = frame

    async def count(self, selector: str) -> int:
        try:
            return await self._frame.locator(selector).count()
        except PlaywrightError as e:
            # Detached or cross-origin frames cannot be queried
            logger.debug(f"Frame {self._frame.url!r} not accessible: {e}")
            return 0

    async def get_attribute(self, selector: str, name: str) -> str | None:
        locator = self._frame.locator(selector).first
        try:
            if await locator.count() == 0:
                return None
            return await locator.get_attribute(name)
        except PlaywrightError as e:
            logger.debug(f"Frame {self._frame.url!r} not accessible: {e}")
            return None


class PlaywrightRow:
    """``GridRow`` backed by a Playwright row locator."""

    def __init__(self, locator: Locator) -> None:
        self._locator = locator

    async def cell_text(self, index: int) -> str | None:
        return await self._locator.locator("td").nth(index).text_content()

    async def has(self, selector: str) -> bool:
        return await self._locator.locator(selector).count() > 0

    async def click(self, selector: str) -> None:
        await self._locator.locator(selector).first.click()


class PlaywrightSession:
    """``BrowserSession`` backed by a Playwright page.

    Use ``PlaywrightSession.open()`` to get a session with its browser
    lifecycle managed.

    Example:
        async with PlaywrightSession.open(headless=True) as session:
            await session.goto(portal.search_url)
    """

    def __init__(self, page: Page) -> None:
        self.page = page

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        browser_type: str = "chromium",
        headless: bool = True,
        viewport: dict[str, int] | None = None,
        locale: str = "en-US",
        timezone_id: str = "America/Los_Angeles",
    ) -> AsyncIterator[PlaywrightSession]:
        """Launch a browser and yield a session on a fresh page.

        Args:
            browser_type: "chromium", "firefox" or "webkit".
            headless: Run without a visible window (False in debug mode).
            viewport: Page size, default 1280x720.
            locale: Browser locale.
            timezone_id: Browser timezone.

        Raises:
            CollaboratorUnavailableException: If the browser cannot start.
        """
        if viewport is None:
            viewport = {"width": 1280, "height": 720}

        playwright = await async_playwright().start()
        try:
            try:
                browser_launcher = getattr(playwright, browser_type)
                browser: Browser = await browser_launcher.launch(
                    headless=headless
                )
            except PlaywrightError as e:
                raise CollaboratorUnavailableException(
                    f"{browser_type} browser", str(e)
                ) from e

            try:
                context_kwargs: dict[str, Any] = {
                    "viewport": viewport,
                    "locale": locale,
                    "timezone_id": timezone_id,
                    "accept_downloads": True,
                }
                browser_context: BrowserContext = await browser.new_context(
                    **context_kwargs
                )
                try:
                    page = await browser_context.new_page()
                    yield cls(page)
                finally:
                    await browser_context.close()
            finally:
                await browser.close()
        finally:
            await playwright.stop()

    async def goto(self, url: str) -> None:
        await self.page.goto(url, wait_until="domcontentloaded")

    async def fill(self, selector: str, text: str) -> None:
        await self.page.locator(selector).first.fill(text)

    async def click(self, selector: str) -> None:
        await self.page.locator(selector).first.click()

    async def press(self, key: str) -> None:
        await self.page.keyboard.press(key)

    async def wait(self, milliseconds: int) -> None:
        await self.page.wait_for_timeout(milliseconds)

    async def wait_for_network_idle(self, timeout: int) -> bool:
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout)
        except PlaywrightTimeoutError:
            return False
        return True

    async def text_content(self, selector: str, timeout: int) -> str | None:
        try:
            return await self.page.locator(selector).first.text_content(
                timeout=timeout
            )
        except PlaywrightTimeoutError:
            return None

    async def count(self, selector: str) -> int:
        return await self.page.locator(selector).count()

    async def rows(self, selector: str) -> list[GridRow]:
        locators = await self.page.locator(selector).all()
        return [PlaywrightRow(locator) for locator in locators]

    def frames(self) -> list[ContentFrame]:
        return [PlaywrightFrame(frame) for frame in self.page.frames]

    async def fetch_bytes(self, url: str) -> bytes:
        data = await self.page.evaluate(_FETCH_BYTES_JS, url)
        return bytes(data)
