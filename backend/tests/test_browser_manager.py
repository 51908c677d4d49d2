"""Tests for the browser lifecycle: nothing stays running after a failure."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from akcija.core.exceptions import ScraperError
from akcija.scrapers.utils import browser_manager
from akcija.scrapers.utils.browser_manager import BrowserManager
from akcija.scrapers.utils.fetchers import BrowserFetcher


@pytest.fixture
def fake_playwright(monkeypatch):
    """Patch async_playwright with a driver whose handles are mocks."""
    playwright = MagicMock()
    playwright.stop = AsyncMock()
    browser = MagicMock()
    browser.close = AsyncMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)

    starter = MagicMock()
    starter.start = AsyncMock(return_value=playwright)
    monkeypatch.setattr(browser_manager, "async_playwright", lambda: starter)
    return playwright


class TestStart:
    async def test_launch_failure_stops_driver(self, fake_playwright):
        fake_playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
        manager = BrowserManager()

        with pytest.raises(PlaywrightError):
            await manager.start()

        fake_playwright.stop.assert_awaited_once()
        assert manager._playwright is None
        assert manager._browser is None

    async def test_fetcher_reports_launch_failure(self, fake_playwright):
        fake_playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

        with pytest.raises(ScraperError) as exc_info:
            async with BrowserFetcher("trefsport"):
                pass

        assert "browser launch failed" in exc_info.value.message
        fake_playwright.stop.assert_awaited_once()


class TestStop:
    async def test_closes_everything(self, fake_playwright):
        manager = BrowserManager()
        await manager.start()
        browser = manager._browser

        await manager.stop()

        browser.close.assert_awaited_once()
        fake_playwright.stop.assert_awaited_once()

    async def test_failed_context_close_still_closes_browser(self, fake_playwright):
        manager = BrowserManager()
        await manager.start()
        browser = manager._browser
        context = MagicMock()
        context.close = AsyncMock(side_effect=PlaywrightError("Target closed"))
        manager._context = context

        with pytest.raises(PlaywrightError):
            await manager.stop()

        browser.close.assert_awaited_once()
        fake_playwright.stop.assert_awaited_once()
        assert manager._context is None
        assert manager._browser is None
