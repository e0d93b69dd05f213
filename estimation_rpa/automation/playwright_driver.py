import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, List, Optional, Sequence, Union

from playwright.async_api import ElementHandle, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from estimation_rpa.automation.driver import ContextClosedError, NavigationTimeoutError
from estimation_rpa.config import Settings, settings
from estimation_rpa.core.config import SCREENSHOTS_DIR

logger = logging.getLogger(__name__)

CLOSED_MARKER = "has been closed"
INTERCEPT_MARKER = "intercepts pointer events"


def _translate(error: PlaywrightError) -> Exception:
    if CLOSED_MARKER in str(error):
        return ContextClosedError(str(error))
    return error


class PlaywrightNode:
    """UINode over a Playwright element handle."""

    def __init__(self, handle: ElementHandle):
        self._handle = handle

    async def click(self, force: bool = False) -> None:
        try:
            await self._handle.click(force=force)
        except PlaywrightError as e:
            # A lingering overlay swallows the click; bypass it once.
            if not force and INTERCEPT_MARKER in str(e):
                logger.info("Click intercepted by an overlay, retrying with force")
                await self._handle.click(force=True)
                return
            raise _translate(e) from e

    async def dblclick(self) -> None:
        try:
            await self._handle.dblclick()
        except PlaywrightError as e:
            raise _translate(e) from e

    async def fill(self, text: str) -> None:
        try:
            await self._handle.fill(text)
        except PlaywrightError as e:
            raise _translate(e) from e

    async def select_option(self, value: Union[str, Sequence[str]]) -> None:
        await self._handle.select_option(value)

    async def is_visible(self) -> bool:
        return await self._handle.is_visible()

    async def is_enabled(self) -> bool:
        return await self._handle.is_enabled()

    async def text_content(self) -> Optional[str]:
        return await self._handle.text_content()

    async def get_attribute(self, name: str) -> Optional[str]:
        return await self._handle.get_attribute(name)

    async def input_value(self) -> str:
        return await self._handle.input_value()

    async def query(self, selector: str) -> Optional["PlaywrightNode"]:
        handle = await self._handle.query_selector(selector)
        return PlaywrightNode(handle) if handle else None

    async def query_all(self, selector: str) -> List["PlaywrightNode"]:
        return [PlaywrightNode(h) for h in await self._handle.query_selector_all(selector)]


class PlaywrightDriver:
    """UIDriver over a single Playwright page."""

    def __init__(self, page: Page, screenshot_dir: Path = SCREENSHOTS_DIR):
        self._page = page
        self._screenshot_dir = Path(screenshot_dir)

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str, timeout_ms: int) -> None:
        try:
            await self._page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(f"Timed out after {timeout_ms}ms loading {url}") from e
        except PlaywrightError as e:
            raise _translate(e) from e

    async def query(self, selector: str) -> Optional[PlaywrightNode]:
        try:
            handle = await self._page.query_selector(selector)
        except PlaywrightError as e:
            raise _translate(e) from e
        return PlaywrightNode(handle) if handle else None

    async def query_all(self, selector: str) -> List[PlaywrightNode]:
        try:
            handles = await self._page.query_selector_all(selector)
        except PlaywrightError as e:
            raise _translate(e) from e
        return [PlaywrightNode(h) for h in handles]

    async def wait(self, ms: int) -> None:
        try:
            await self._page.wait_for_timeout(ms)
        except PlaywrightError as e:
            raise _translate(e) from e

    async def screenshot(self, full_page: bool = True) -> bytes:
        """Capture the page; a copy is also written under the screenshot directory."""
        self._screenshot_dir.mkdir(parents=True, exist_ok=True)
        path = self._screenshot_dir / f"page_{datetime.now():%Y%m%d_%H%M%S_%f}.png"
        return await self._page.screenshot(path=str(path), full_page=full_page)

    async def evaluate(self, script: str) -> object:
        try:
            return await self._page.evaluate(script)
        except PlaywrightError as e:
            raise _translate(e) from e

    async def press(self, key: str) -> None:
        await self._page.keyboard.press(key)

    async def click(self, selector: str, force: bool = False) -> None:
        try:
            await self._page.click(selector, force=force)
        except PlaywrightError as e:
            raise _translate(e) from e

    async def title(self) -> str:
        return await self._page.title()

    def is_closed(self) -> bool:
        return self._page.is_closed()


@asynccontextmanager
async def browser_session(config: Settings = settings) -> AsyncIterator[PlaywrightDriver]:
    """Own one browser for the duration of one job; always torn down on exit."""
    playwright = await async_playwright().start()
    browser = None
    try:
        browser = await playwright.chromium.launch(
            headless=config.BROWSER_HEADLESS,
            slow_mo=config.BROWSER_SLOW_MO,
            timeout=config.BROWSER_TIMEOUT,
        )
        context = await browser.new_context(
            viewport={"width": config.VIEWPORT_WIDTH, "height": config.VIEWPORT_HEIGHT}
        )
        page = await context.new_page()
        logger.info(f"Browser session started (headless={config.BROWSER_HEADLESS})")
        yield PlaywrightDriver(page)
    finally:
        try:
            if browser is not None:
                await browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            await playwright.stop()
            logger.info("Browser session released")
