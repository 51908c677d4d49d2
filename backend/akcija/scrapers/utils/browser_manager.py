"""Playwright browser lifecycle with anti-detection.

One manager is opened per store pass and closed before the next store
starts, so at most one Chromium instance is alive at a time.
"""

import asyncio
from typing import Optional

import structlog
from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from akcija.scrapers.utils.user_agents import get_random_user_agent

logger = structlog.get_logger(__name__)


class BrowserManager:
    """Launches Chromium and hands out a single stealth context.

    Usage:
        async with BrowserManager(headless=True) as browser:
            page = await browser.new_page()
    """

    def __init__(self, headless: bool = True, block_resources: bool = True):
        self._headless = headless
        self._block_resources = block_resources
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "BrowserManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def start(self) -> None:
        """Launch the browser.

        Playwright is stopped again if Chromium fails to launch.
        """
        async with self._lock:
            if self._browser:
                return
            self._playwright = await async_playwright().start()
            try:
                self._browser = await self._playwright.chromium.launch(
                    headless=self._headless,
                    args=[
                        "--disable-blink-features=AutomationControlled",
                        "--disable-dev-shm-usage",
                        "--no-sandbox",
                    ],
                )
            except BaseException:
                playwright, self._playwright = self._playwright, None
                await playwright.stop()
                raise
            logger.info("browser_started", headless=self._headless)

    async def stop(self) -> None:
        """Close the context, the browser and Playwright.

        Each handle is released even when closing an earlier one fails.
        """
        async with self._lock:
            context, self._context = self._context, None
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None
            try:
                if context:
                    await context.close()
            finally:
                try:
                    if browser:
                        await browser.close()
                finally:
                    if playwright:
                        await playwright.stop()
            logger.info("browser_stopped")

    async def get_context(self) -> BrowserContext:
        """Get or create the stealth browser context."""
        if self._context:
            return self._context

        if not self._browser:
            await self.start()

        context = await self._browser.new_context(
            user_agent=get_random_user_agent(),
            viewport={"width": 1920, "height": 1080},
            locale="sr-RS",
            timezone_id="Europe/Belgrade",
            java_script_enabled=True,
            bypass_csp=True,
        )

        await context.add_init_script(STEALTH_JS)

        # Fonts and media are never parsed; images stay because lazy
        # loaders only fill src attributes for loaded images
        if self._block_resources:
            await context.route(
                "**/*.{woff,woff2,ttf,eot,mp4,webm}",
                lambda route: route.abort(),
            )

        self._context = context
        logger.info("browser_context_created")
        return context

    async def new_page(self) -> Page:
        """Convenience: get the context and open a new page."""
        ctx = await self.get_context()
        return await ctx.new_page()


# Minimal stealth JS to mask automation signals
STEALTH_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['sr-RS', 'sr', 'en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
window.chrome = { runtime: {} };
const originalQuery = window.navigator.permissions.query;
window.navigator.permissions.query = (parameters) =>
  parameters.name === 'notifications'
    ? Promise.resolve({ state: Notification.permission })
    : originalQuery(parameters);
"""
