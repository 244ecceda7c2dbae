"""
Shared headless browser session.

One Chromium instance is launched per batch and handed to every rendered-DOM
attempt. Each attempt opens its own page through ``BrowserSession.page()``,
which closes the page on both the success and the failure path.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from marketcompat.config import config as default_config
from marketcompat.utils.error_handling import ResourceError
from marketcompat.utils.logging_config import logger


@dataclass
class BrowserConfig:
    """Settings for launching the browser and creating its context."""

    headless: bool = True
    user_agent: Optional[str] = None
    viewport_width: int = 1280
    viewport_height: int = 900
    extra_args: List[str] = field(default_factory=lambda: ["--no-sandbox", "--disable-dev-shm-usage"])
    extra_headers: Dict[str, str] = field(default_factory=lambda: {"Accept-Language": "en-US,en;q=0.9"})

    @classmethod
    def from_config(cls, config=None) -> "BrowserConfig":
        config = config or default_config
        return cls(
            headless=config.get("BROWSER_HEADLESS", True),
            user_agent=config.get("USER_AGENT"),
        )


class BrowserSession:
    """
    Scoped Playwright browser.

    Usage::

        async with BrowserSession(BrowserConfig()) as session:
            async with session.page() as page:
                await page.goto(url)
    """

    def __init__(self, browser_config: Optional[BrowserConfig] = None):
        self.browser_config = browser_config or BrowserConfig()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    @property
    def is_started(self) -> bool:
        return self._context is not None

    async def start(self) -> "BrowserSession":
        """
        Launch Chromium and create the shared browser context.

        Raises:
            ResourceError: If the browser cannot be launched
        """
        if self.is_started:
            return self

        cfg = self.browser_config
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=cfg.headless,
                args=cfg.extra_args,
            )
            self._context = await self._browser.new_context(
                user_agent=cfg.user_agent,
                viewport={"width": cfg.viewport_width, "height": cfg.viewport_height},
                extra_http_headers=cfg.extra_headers,
            )
        except (PlaywrightError, OSError) as e:
            await self.close()
            raise ResourceError(f"Could not launch headless browser: {e}", cause=e)

        logger.info("Headless browser started")
        return self

    async def close(self) -> None:
        """Release the context, browser and Playwright driver; safe to call twice."""
        for name, closer in (
            ("context", self._context.close if self._context else None),
            ("browser", self._browser.close if self._browser else None),
            ("playwright", self._playwright.stop if self._playwright else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser {name}: {e}")
        if self._context is not None:
            logger.info("Headless browser closed")
        self._context = None
        self._browser = None
        self._playwright = None

    async def __aenter__(self) -> "BrowserSession":
        return await self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open a dedicated page, closing it when the block exits."""
        if not self.is_started:
            raise ResourceError("Browser session is not started")
        page = await self._context.new_page()
        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing page: {e}")
