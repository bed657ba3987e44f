"""
Chromium Renderer
=================

Playwright-backed implementation of the renderer interfaces.

One Chromium process is shared by every pipeline run in the process. It is
launched lazily on the first session and stopped by ``close_all``. Each
session gets its own browser context (and therefore its own pages), and
the number of concurrent sessions is bounded by a semaphore.

Usage:
    pool = ChromiumRendererPool(max_sessions=3)
    async with pool.session() as session:
        page = await session.new_page()
        await page.set_content(html)
        pdf_bytes = await page.pdf(RenderOptions())
    await pool.close_all()
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, List, Optional, Sequence, TypeVar
import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..errors import BrowserLaunchError, RenderError, RenderTimeoutError
from .base import PageHandle, RendererPool, RenderOptions, RenderSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Flags for running Chromium headless inside containers/servers.
CHROME_PARAMETERS: List[str] = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",  # /dev/shm is tiny under Docker
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--hide-scrollbars",
    "--mute-audio",
    "--font-render-hinting=none",
]

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_6) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/85.0.4183.121 Safari/537.36"
)


def to_playwright_pdf_kwargs(options: RenderOptions) -> dict:
    """Translate ``RenderOptions`` into ``Page.pdf`` keyword arguments."""
    return {
        "format": options.page_format,
        "margin": {"top": options.margin_top, "bottom": options.margin_bottom},
        "header_template": options.header_template,
        "footer_template": options.footer_template,
        "print_background": options.print_background,
        "display_header_footer": options.display_header_footer,
        "prefer_css_page_size": options.prefer_css_page_size,
    }


class ChromiumPage(PageHandle):
    """Wraps a Playwright page; every browser call is bounded by ``timeout_s``."""

    def __init__(self, page: Any, timeout_s: float, wait_until: str = "domcontentloaded"):
        self._page = page
        self._timeout_s = timeout_s
        self._wait_until = wait_until

    async def _bounded(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout_s)
        except asyncio.TimeoutError as e:
            raise RenderTimeoutError(operation, self._timeout_s) from e
        except PlaywrightError as e:
            raise RenderError(f"{operation} failed: {e}") from e

    async def set_content(self, html: str) -> None:
        await self._bounded(
            "set_content",
            self._page.set_content(html, wait_until=self._wait_until),
        )

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._bounded("evaluate", self._page.evaluate(script, arg))

    async def pdf(self, options: RenderOptions) -> bytes:
        return await self._bounded("pdf", self._page.pdf(**to_playwright_pdf_kwargs(options)))

    async def content(self) -> str:
        return await self._bounded("content", self._page.content())

    async def close(self) -> None:
        try:
            await self._page.close()
        except PlaywrightError as e:
            logger.warning(f"Could not close page: {e}")


class ChromiumSession(RenderSession):
    """Browser context for one pipeline run."""

    def __init__(self, context: Any, timeout_s: float, wait_until: str):
        self._context = context
        self._timeout_s = timeout_s
        self._wait_until = wait_until
        self._pages: List[ChromiumPage] = []

    async def new_page(self) -> PageHandle:
        try:
            page = await self._context.new_page()
        except PlaywrightError as e:
            raise RenderError(f"Could not open a new page: {e}") from e
        handle = ChromiumPage(page, self._timeout_s, self._wait_until)
        self._pages.append(handle)
        return handle

    async def close(self) -> None:
        for page in self._pages:
            await page.close()
        self._pages.clear()
        try:
            await self._context.close()
        except PlaywrightError as e:
            logger.warning(f"Could not close browser context: {e}")


class ChromiumRendererPool(RendererPool):
    """
    Shared headless Chromium with a bounded number of concurrent sessions.

    Args:
        executable_path: Chromium/Chrome binary; Playwright's bundled build if None
        args: Command-line flags for the browser process
        headless: Run without a window
        user_agent: User agent for every browser context
        max_sessions: Maximum number of pipeline runs rendering at once
        timeout_s: Timeout applied to each navigation/evaluate/print call
        launch_timeout_s: Timeout for starting the browser process
        wait_until: Load state awaited by ``set_content``
    """

    def __init__(
        self,
        executable_path: Optional[str] = None,
        args: Optional[Sequence[str]] = None,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        max_sessions: int = 3,
        timeout_s: float = 120.0,
        launch_timeout_s: float = 30.0,
        wait_until: str = "domcontentloaded",
    ):
        self.executable_path = executable_path
        self.args = list(args) if args is not None else list(CHROME_PARAMETERS)
        self.headless = headless
        self.user_agent = user_agent
        self.max_sessions = max_sessions
        self.timeout_s = timeout_s
        self.launch_timeout_s = launch_timeout_s
        self.wait_until = wait_until

        self._playwright = None
        self._browser = None
        self._launch_lock: Optional[asyncio.Lock] = None
        self._slots: Optional[asyncio.Semaphore] = None

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    def _ensure_primitives(self) -> None:
        # Created lazily so they bind to the running event loop.
        if self._launch_lock is None:
            self._launch_lock = asyncio.Lock()
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.max_sessions)

    async def open(self) -> None:
        self._ensure_primitives()
        async with self._launch_lock:
            if self._browser is not None:
                return
            logger.info("Launching headless Chromium for PDF generation...")
            try:
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.headless,
                    executable_path=self.executable_path,
                    args=self.args,
                    timeout=self.launch_timeout_s * 1000,
                )
            except PlaywrightError as e:
                await self._stop_playwright()
                raise BrowserLaunchError(f"Chromium launch failed: {e}") from e
            logger.info(f"Chromium launched successfully (version {self._browser.version})")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[RenderSession]:
        await self.open()
        async with self._slots:
            try:
                context = await self._browser.new_context(user_agent=self.user_agent)
            except PlaywrightError as e:
                raise RenderError(f"Could not create browser context: {e}") from e
            session = ChromiumSession(context, self.timeout_s, self.wait_until)
            try:
                yield session
            finally:
                await session.close()

    async def version(self) -> str:
        await self.open()
        return self._browser.version

    async def close_all(self) -> None:
        if self._browser is not None:
            logger.info("Closing headless Chromium")
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.warning(f"Error while closing Chromium: {e}")
            self._browser = None
        await self._stop_playwright()

    async def _stop_playwright(self) -> None:
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
