import asyncio

import pytest

from archive_hub.errors import BrowserInitError
from archive_hub.services import browser as browser_module
from archive_hub.services.browser import BrowserManager


class StubChromium:
    def __init__(self, fail=False):
        self.fail = fail
        self.launched = []

    async def launch(self, **kwargs):
        if self.fail:
            raise RuntimeError("Executable doesn't exist")
        b = StubBrowser()
        self.launched.append(b)
        return b


class StubPage:
    def __init__(self):
        self.default_timeout = None

    def set_default_timeout(self, timeout):
        self.default_timeout = timeout


class StubBrowser:
    version = "122.0"

    def __init__(self):
        self.connected = True
        self.page_kwargs = None

    def is_connected(self):
        return self.connected

    async def new_page(self, **kwargs):
        self.page_kwargs = kwargs
        return StubPage()

    async def close(self):
        self.connected = False


class StubPlaywright:
    def __init__(self, chromium):
        self.chromium = chromium
        self.stopped = False

    async def stop(self):
        self.stopped = True


def patch_playwright(monkeypatch, chromium):
    drivers = []

    class Starter:
        async def start(self):
            pw = StubPlaywright(chromium)
            drivers.append(pw)
            return pw

    monkeypatch.setattr(browser_module, "async_playwright", lambda: Starter())
    return drivers


def test_launch_failure_raises_browser_init_error(monkeypatch, config):
    drivers = patch_playwright(monkeypatch, StubChromium(fail=True))
    manager = BrowserManager(config)

    with pytest.raises(BrowserInitError, match="Executable doesn't exist"):
        asyncio.run(manager.start())
    assert not manager.is_healthy()
    assert drivers[0].stopped


def test_start_stop(monkeypatch, config):
    chromium = StubChromium()
    drivers = patch_playwright(monkeypatch, chromium)
    manager = BrowserManager(config)

    async def run():
        await manager.start()
        await manager.start()
        assert manager.is_healthy()
        await manager.stop()
        await manager.stop()

    asyncio.run(run())
    assert len(chromium.launched) == 1
    assert not manager.is_healthy()
    assert drivers[0].stopped


def test_new_page_restarts_a_disconnected_browser(monkeypatch, config):
    chromium = StubChromium()
    patch_playwright(monkeypatch, chromium)
    manager = BrowserManager(config)

    async def run():
        await manager.start()
        chromium.launched[0].connected = False
        return await manager.new_page()

    page = asyncio.run(run())
    assert page.default_timeout == config.playwright_timeout_ms
    assert len(chromium.launched) == 2
    assert chromium.launched[1].page_kwargs["viewport"] == {"width": 1280, "height": 900}


def test_pages_use_configured_timeout(monkeypatch, config):
    config.playwright_timeout_ms = 4500
    patch_playwright(monkeypatch, StubChromium())
    manager = BrowserManager(config)

    async def run():
        await manager.start()
        return await manager.new_page()

    assert asyncio.run(run()).default_timeout == 4500
