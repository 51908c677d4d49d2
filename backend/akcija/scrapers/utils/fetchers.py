"""Page fetchers: rendered HTML via Playwright or raw HTML via httpx.

Both are async context managers scoped to one store pass. Failures are
raised as ``ScraperError`` so callers handle one exception family
regardless of transport.
"""

import re
from abc import ABC, abstractmethod
from typing import Callable, Optional

import httpx
import structlog
from playwright.async_api import Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeoutError

from akcija.config import settings
from akcija.core.exceptions import BlockedError, ScraperError
from akcija.scrapers.utils.browser_manager import BrowserManager
from akcija.scrapers.utils.delay import DelayPolicy
from akcija.scrapers.utils.retry import http_retry, playwright_retry
from akcija.scrapers.utils.user_agents import get_default_headers

logger = structlog.get_logger(__name__)

_BLOCK_TITLE_RE = re.compile(
    r"<title>[^<]*(Just a moment|Attention Required|Access denied|Cloudflare|blocked)[^<]*</title>",
    re.I,
)


def is_block_page(html: str) -> bool:
    """True when the HTML is an anti-bot interstitial instead of store markup."""
    return bool(_BLOCK_TITLE_RE.search(html or ""))


class BaseFetcher(ABC):
    """Fetches store pages as HTML strings."""

    def __init__(self, store: str):
        self.store = store
        self.logger = logger.bind(store=store, fetcher=type(self).__name__)

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        """Acquire transport resources."""

    async def close(self) -> None:
        """Release transport resources, also on the error path."""

    @abstractmethod
    async def get(self, url: str, wait_selector: Optional[str] = None) -> str:
        """Fetch a page and return its HTML.

        Args:
            url: Absolute page URL
            wait_selector: CSS selector to wait for (browser only)

        Raises:
            ScraperError: If the page cannot be fetched after retries
            BlockedError: If the store served an anti-bot page
        """

    async def load_more(
        self,
        url: str,
        button_selector: str,
        item_selector: str,
        max_clicks: int = 50,
        should_stop: Optional[Callable[[str], bool]] = None,
        delay: Optional[DelayPolicy] = None,
    ) -> str:
        """Fetch a "load more" listing. Without a browser only the first batch is served."""
        return await self.get(url, item_selector)

    def _check_block(self, html: str, url: str) -> str:
        if is_block_page(html):
            raise BlockedError(self.store, url)
        return html


class HttpFetcher(BaseFetcher):
    """Plain HTTP fetcher for stores that render listings server-side."""

    def __init__(self, store: str, timeout: Optional[float] = None):
        super().__init__(store)
        self._timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self._client: Optional[httpx.AsyncClient] = None

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=get_default_headers(),
                timeout=self._timeout,
                follow_redirects=True,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @http_retry
    async def _request(self, url: str) -> httpx.Response:
        response = await self._client.get(url)
        # 5xx is retried; 4xx is final
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    async def get(self, url: str, wait_selector: Optional[str] = None) -> str:
        await self.open()
        self.logger.debug("fetching_url", url=url)
        try:
            response = await self._request(url)
        except httpx.HTTPError as e:
            raise ScraperError(self.store, f"GET {url} failed: {e}") from e

        if response.status_code >= 400:
            raise ScraperError(self.store, f"GET {url} returned HTTP {response.status_code}")
        return self._check_block(response.text, url)


class BrowserFetcher(BaseFetcher):
    """Headless-browser fetcher for JavaScript-rendered stores."""

    def __init__(
        self,
        store: str,
        headless: Optional[bool] = None,
        timeout_ms: Optional[int] = None,
    ):
        super().__init__(store)
        self._manager = BrowserManager(headless=settings.HEADLESS if headless is None else headless)
        self._timeout_ms = timeout_ms or settings.NAVIGATION_TIMEOUT_MS
        self._page: Optional[Page] = None

    async def open(self) -> None:
        try:
            await self._manager.start()
        except PlaywrightError as e:
            raise ScraperError(self.store, f"browser launch failed: {e}") from e

    async def close(self) -> None:
        self._page = None
        await self._manager.stop()

    async def _get_page(self) -> Page:
        if self._page is None or self._page.is_closed():
            self._page = await self._manager.new_page()
        return self._page

    @playwright_retry
    async def _goto(self, page: Page, url: str) -> None:
        await page.goto(url, wait_until="domcontentloaded", timeout=self._timeout_ms)

    async def _navigate(self, url: str, wait_selector: Optional[str]) -> Page:
        page = await self._get_page()
        self.logger.debug("navigating", url=url)
        try:
            await self._goto(page, url)
        except PlaywrightError as e:
            raise ScraperError(self.store, f"navigation to {url} failed: {e}") from e

        if wait_selector:
            try:
                await page.wait_for_selector(wait_selector, timeout=15000)
            except PlaywrightTimeoutError:
                # Empty listings and sold-out pages never render the selector
                self.logger.info("wait_selector_missing", url=url, selector=wait_selector)
        return page

    async def get(self, url: str, wait_selector: Optional[str] = None) -> str:
        page = await self._navigate(url, wait_selector)
        html = await page.content()
        return self._check_block(html, url)

    async def load_more(
        self,
        url: str,
        button_selector: str,
        item_selector: str,
        max_clicks: int = 50,
        should_stop: Optional[Callable[[str], bool]] = None,
        delay: Optional[DelayPolicy] = None,
    ) -> str:
        """Click a "load more" control until the listing stops growing.

        Stops when the button disappears, the item count does not grow
        after a click, ``should_stop`` returns True for the current HTML,
        or ``max_clicks`` is reached.

        Returns:
            Final page HTML with every loaded item
        """
        page = await self._navigate(url, item_selector)
        self._check_block(await page.content(), url)
        delay = delay or DelayPolicy.none()

        previous = await page.locator(item_selector).count()
        clicks = 0
        while clicks < max_clicks:
            if should_stop and should_stop(await page.content()):
                self.logger.info("load_more_stop_condition", url=url, clicks=clicks, items=previous)
                break

            button = page.locator(button_selector).first
            if await button.count() == 0 or not await button.is_visible():
                break

            try:
                await button.scroll_into_view_if_needed()
                await button.click()
                await page.wait_for_function(
                    "([sel, n]) => document.querySelectorAll(sel).length > n",
                    arg=[item_selector, previous],
                    timeout=15000,
                )
            except PlaywrightTimeoutError:
                self.logger.info("load_more_stalled", url=url, clicks=clicks, items=previous)
                break
            except PlaywrightError as e:
                raise ScraperError(self.store, f"load more on {url} failed: {e}") from e

            clicks += 1
            current = await page.locator(item_selector).count()
            self.logger.debug("load_more_clicked", clicks=clicks, items=current)
            if current <= previous:
                break
            previous = current
            await delay.wait()

        return await page.content()
