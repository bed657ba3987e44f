"""
Tests for the Playwright-backed renderer, with Playwright replaced by fakes.

Run with: pytest HTMLtoPDFUsingChromium/tests/test_chromium_adapter.py -v
"""

import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError

from HTMLtoPDFUsingChromium.report_core.adapters import chromium
from HTMLtoPDFUsingChromium.report_core.adapters.base import RenderOptions
from HTMLtoPDFUsingChromium.report_core.adapters.chromium import (
    ChromiumPage,
    ChromiumRendererPool,
    to_playwright_pdf_kwargs,
)
from HTMLtoPDFUsingChromium.report_core.errors import (
    BrowserLaunchError,
    RenderError,
    RenderTimeoutError,
)


class PlaywrightPage:
    def __init__(self, delay=0.0, error=None):
        self.delay = delay
        self.error = error
        self.pdf_kwargs = None
        self.wait_until = None
        self.closed = False

    async def set_content(self, html, wait_until=None):
        self.wait_until = wait_until
        await asyncio.sleep(self.delay)
        if self.error:
            raise self.error

    async def evaluate(self, script, arg=None):
        if self.error:
            raise self.error
        return arg

    async def pdf(self, **kwargs):
        self.pdf_kwargs = kwargs
        return b"%PDF"

    async def content(self):
        return "<html></html>"

    async def close(self):
        self.closed = True


class PlaywrightContext:
    def __init__(self):
        self.pages = []
        self.closed = False

    async def new_page(self):
        page = PlaywrightPage()
        self.pages.append(page)
        return page

    async def close(self):
        self.closed = True


class PlaywrightBrowser:
    version = "120.0.6099.28"

    def __init__(self):
        self.contexts = []
        self.closed = False

    async def new_context(self, user_agent=None):
        context = PlaywrightContext()
        context.user_agent = user_agent
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed = True


class PlaywrightDriver:
    """Replacement for the object returned by ``async_playwright()``."""

    def __init__(self, launch_error=None):
        self.launch_error = launch_error
        self.launches = []
        self.browser = None
        self.stopped = False
        self.chromium = self

    def __call__(self):
        return self

    async def start(self):
        return self

    async def launch(self, **kwargs):
        self.launches.append(kwargs)
        await asyncio.sleep(0)
        if self.launch_error:
            raise self.launch_error
        self.browser = PlaywrightBrowser()
        return self.browser

    async def stop(self):
        self.stopped = True


@pytest.fixture
def driver(monkeypatch):
    fake = PlaywrightDriver()
    monkeypatch.setattr(chromium, "async_playwright", fake)
    return fake


class TestChromiumPage:
    """Tests for ChromiumPage error translation."""

    @pytest.mark.asyncio
    async def test_timeout(self):
        page = ChromiumPage(PlaywrightPage(delay=1.0), timeout_s=0.01)
        with pytest.raises(RenderTimeoutError) as exc_info:
            await page.set_content("<html/>")
        assert exc_info.value.operation == "set_content"
        assert isinstance(exc_info.value, RenderError)

    @pytest.mark.asyncio
    async def test_playwright_error(self):
        page = ChromiumPage(PlaywrightPage(error=PlaywrightError("Target closed")), timeout_s=5)
        with pytest.raises(RenderError, match="evaluate failed"):
            await page.evaluate("() => 1")

    @pytest.mark.asyncio
    async def test_wait_until_passed(self):
        raw = PlaywrightPage()
        await ChromiumPage(raw, timeout_s=5, wait_until="load").set_content("<html/>")
        assert raw.wait_until == "load"

    @pytest.mark.asyncio
    async def test_pdf_options(self):
        raw = PlaywrightPage()
        options = RenderOptions().with_margins(top="35mm").with_templates("<h/>", "<f/>")
        assert await ChromiumPage(raw, timeout_s=5).pdf(options) == b"%PDF"
        assert raw.pdf_kwargs == to_playwright_pdf_kwargs(options)
        assert raw.pdf_kwargs["margin"] == {"top": "35mm", "bottom": "25mm"}
        assert raw.pdf_kwargs["display_header_footer"] is True
        assert raw.pdf_kwargs["prefer_css_page_size"] is False


class TestChromiumRendererPool:
    """Tests for browser lifecycle and session bounding."""

    @pytest.mark.asyncio
    async def test_lazy_single_launch(self, driver):
        pool = ChromiumRendererPool(executable_path="/opt/chromium")
        assert not pool.is_open

        await asyncio.gather(pool.open(), pool.open(), pool.open())

        assert pool.is_open
        assert len(driver.launches) == 1
        assert driver.launches[0]["executable_path"] == "/opt/chromium"
        assert "--no-sandbox" in driver.launches[0]["args"]

    @pytest.mark.asyncio
    async def test_launch_failure(self, monkeypatch):
        fake = PlaywrightDriver(launch_error=PlaywrightError("Executable doesn't exist"))
        monkeypatch.setattr(chromium, "async_playwright", fake)
        pool = ChromiumRendererPool()

        with pytest.raises(BrowserLaunchError):
            await pool.open()
        assert not pool.is_open
        assert fake.stopped

    @pytest.mark.asyncio
    async def test_session_closes_pages_and_context(self, driver):
        pool = ChromiumRendererPool(user_agent="test-agent")
        async with pool.session() as session:
            await session.new_page()
            await session.new_page()

        (context,) = driver.browser.contexts
        assert context.user_agent == "test-agent"
        assert context.closed
        assert all(page.closed for page in context.pages)

    @pytest.mark.asyncio
    async def test_sessions_bounded(self, driver):
        pool = ChromiumRendererPool(max_sessions=2)
        active = 0
        peak = 0

        async def job():
            nonlocal active, peak
            async with pool.session():
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1

        await asyncio.gather(*(job() for _ in range(5)))

        assert peak == 2
        assert len(driver.browser.contexts) == 5

    @pytest.mark.asyncio
    async def test_version_and_close(self, driver):
        pool = ChromiumRendererPool()
        assert await pool.version() == "120.0.6099.28"
        await pool.close_all()
        assert driver.browser.closed
        assert driver.stopped
        assert not pool.is_open
