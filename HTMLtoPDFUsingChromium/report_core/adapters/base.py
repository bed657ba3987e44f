"""
Base Renderer Classes
=====================

Abstract interfaces for the HTML renderer used by the pipeline.

The pipeline only needs three things from a browser:

- load an HTML string into a page,
- run a script against the page's live DOM and get serializable data back,
- print the page to a PDF buffer with header/footer templates and margins.

Extend ``PageHandle`` and ``RendererPool`` to plug in another engine.
The Chromium implementation lives in ``report_core.adapters.chromium``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, AsyncContextManager, Optional
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderOptions:
    """
    Print options for a single render call.

    Instances are immutable; derive variants with ``with_margins`` and
    ``with_templates``.

    Attributes:
        page_format: Paper size name understood by the browser (e.g. "A4")
        margin_top: CSS length for the top margin
        margin_bottom: CSS length for the bottom margin
        header_template: HTML printed at the top of every page
        footer_template: HTML printed at the bottom of every page
        print_background: Whether background colors/images are printed
        display_header_footer: Whether the templates are printed at all
        prefer_css_page_size: Whether CSS @page size rules win over page_format
    """
    page_format: str = "A4"
    margin_top: str = "20mm"
    margin_bottom: str = "25mm"
    header_template: str = ""
    footer_template: str = ""
    print_background: bool = True
    display_header_footer: bool = True
    prefer_css_page_size: bool = False

    def with_margins(self, top: Optional[str] = None, bottom: Optional[str] = None) -> "RenderOptions":
        return replace(
            self,
            margin_top=top if top is not None else self.margin_top,
            margin_bottom=bottom if bottom is not None else self.margin_bottom,
        )

    def with_templates(self, header: str, footer: str) -> "RenderOptions":
        return replace(self, header_template=header, footer_template=footer)


class PageHandle(ABC):
    """
    A single browser page holding one document-under-render.

    A handle is owned by exactly one pipeline run. Scripts evaluated on it
    mutate its live DOM until the content is replaced or the page closed.
    """

    @abstractmethod
    async def set_content(self, html: str) -> None:
        """Replace the page's document with ``html``."""
        pass

    @abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any:
        """
        Run a JavaScript function in the page and return its result.

        Args:
            script: Source of a function expression, e.g. ``"(arg) => ..."``
            arg: JSON-serializable argument passed to the function
        """
        pass

    @abstractmethod
    async def pdf(self, options: RenderOptions) -> bytes:
        """Print the current document to a PDF buffer."""
        pass

    @abstractmethod
    async def content(self) -> str:
        """Serialize the current document (including DOM mutations)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class RenderSession(ABC):
    """Set of pages belonging to one pipeline run, disposed together."""

    @abstractmethod
    async def new_page(self) -> PageHandle:
        pass


class RendererPool(ABC):
    """
    Process-wide renderer shared by all pipeline runs.

    Constructed once by the process owner (CLI or HTTP app) and passed to
    the pipeline. ``open`` may be called any number of times; the
    underlying browser is started on first use and stopped by
    ``close_all``.
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        pass

    @abstractmethod
    async def open(self) -> None:
        pass

    @abstractmethod
    def session(self) -> AsyncContextManager[RenderSession]:
        """Acquire a render slot and yield a session; pages close on exit."""
        pass

    @abstractmethod
    async def version(self) -> str:
        pass

    @abstractmethod
    async def close_all(self) -> None:
        pass
