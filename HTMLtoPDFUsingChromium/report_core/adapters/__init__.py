"""
Renderer Adapters
=================

Browser engines able to load HTML, mutate it with scripts, and print it
to PDF.

Components:
- RenderOptions: Immutable print options for one render call
- PageHandle / RenderSession / RendererPool: Abstract renderer interfaces
- ChromiumRendererPool: Playwright/Chromium implementation
"""

from .base import (
    PageHandle,
    RendererPool,
    RenderOptions,
    RenderSession,
)

from .chromium import (
    CHROME_PARAMETERS,
    DEFAULT_USER_AGENT,
    ChromiumPage,
    ChromiumRendererPool,
    ChromiumSession,
)

__all__ = [
    # Interfaces
    "PageHandle",
    "RendererPool",
    "RenderOptions",
    "RenderSession",
    # Chromium
    "CHROME_PARAMETERS",
    "DEFAULT_USER_AGENT",
    "ChromiumPage",
    "ChromiumRendererPool",
    "ChromiumSession",
]
