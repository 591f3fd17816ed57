"""Tests for the shared browser handle."""

import pytest

from price_scraper.ingest.browser import BrowserManager


class FakeBrowser:
    def __init__(self):
        self.connected = True
        self.closed = False

    def is_connected(self):
        return self.connected

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self):
        self.launches = []

    async def launch(self, **kwargs):
        browser = FakeBrowser()
        self.launches.append((kwargs, browser))
        return browser


class FakePlaywright:
    def __init__(self):
        self.chromium = FakeChromium()
        self.stopped = False

    async def stop(self):
        self.stopped = True


def make_manager():
    manager = BrowserManager()
    playwright = FakePlaywright()
    manager._playwright = playwright
    return manager, playwright


@pytest.mark.asyncio
async def test_browser_is_launched_once_and_reused():
    """Test lazy launch and reuse across calls."""
    manager, playwright = make_manager()

    first = await manager.get_browser()
    second = await manager.get_browser()

    assert first is second
    assert len(playwright.chromium.launches) == 1
    assert playwright.chromium.launches[0][0]["headless"] is True


@pytest.mark.asyncio
async def test_disconnected_browser_is_relaunched():
    """Test relaunch after the browser process goes away."""
    manager, playwright = make_manager()

    first = await manager.get_browser()
    first.connected = False
    second = await manager.get_browser()

    assert second is not first
    assert len(playwright.chromium.launches) == 2


@pytest.mark.asyncio
async def test_close_shuts_down_browser_and_playwright():
    """Test shutdown through the async context manager."""
    manager, playwright = make_manager()

    async with manager:
        browser = await manager.get_browser()

    assert browser.closed
    assert playwright.stopped
    assert manager._browser is None


@pytest.mark.asyncio
async def test_close_without_launch_is_noop():
    """Test closing a manager that never launched a browser."""
    await BrowserManager().close()
