"""
DOM Projections
===============

Browser-side scripts that mutate the loaded report and serialize the
result. This module is the only place where the pipeline talks to the
page's DOM; everything else goes through ``DomProjection``.

Two projections of the same loaded document are used for the final
renders:

- COVER: every ``section`` except the cover section is hidden.
- BODY:  the cover section is kept as an empty flex box (so it still
         produces one artifact page) and every other section is shown.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from ..adapters.base import PageHandle

logger = logging.getLogger(__name__)


@dataclass
class DomContract:
    """
    Element ids and class names the report HTML must provide.

    Attributes:
        cover_section_id: id of the ``section`` rendered alone on page 1
        toc_container_id: id of the table-of-contents list
        total_pages_class: class of the node(s) receiving the page count
        first_page_header_id: header template for the cover page
        first_page_footer_id: footer template for the cover page
        header_id: header template for all other pages
        footer_id: footer template for all other pages
        title_page_number_class: class of page numbers of top-level entries
        subtitle_page_number_class: class of page numbers of sub-entries
        dots_class: class of the leader-dots span
    """
    cover_section_id: str = "presentation"
    toc_container_id: str = "table-of-content"
    total_pages_class: str = "totalPages"
    first_page_header_id: str = "header-first-page"
    first_page_footer_id: str = "footer-first-page"
    header_id: str = "header-container"
    footer_id: str = "footer"
    title_page_number_class: str = "title-page-number"
    subtitle_page_number_class: str = "subtitle-page-number"
    dots_class: str = "dots"


class ProjectionKind(str, Enum):
    COVER = "cover"
    BODY = "body"


@dataclass
class Projection:
    """Serialized document for one render pass plus auxiliary HTML fragments."""
    kind: ProjectionKind
    html: str
    aux_html: List[str] = field(default_factory=list)

    @property
    def header(self) -> Optional[str]:
        return self.aux_html[0] if len(self.aux_html) > 0 else None

    @property
    def footer(self) -> Optional[str]:
        return self.aux_html[1] if len(self.aux_html) > 1 else None


# ============================================================================
# BROWSER SCRIPTS
# ============================================================================

# Sections touched by a projection keep their authored inline display in
# data-projection-display until RESTORE_SECTIONS_JS puts it back.
COVER_PROJECTION_JS = """
({coverId, headerId, footerId}) => {
    document.querySelectorAll('section').forEach((section) => {
        if (!section.hasAttribute('data-projection-display')) {
            section.setAttribute('data-projection-display', section.style.display);
        }
        if (section.id !== coverId) {
            section.style.display = 'none';
        }
    });
    const header = document.getElementById(headerId);
    const footer = document.getElementById(footerId);
    return [
        document.documentElement.outerHTML,
        header ? header.outerHTML : null,
        footer ? footer.outerHTML : null,
    ];
}
"""

BODY_PROJECTION_JS = """
({coverId, extraPages}) => {
    const cover = document.getElementById(coverId);
    if (cover) {
        cover.style.display = 'flex';
        if (extraPages === 0) {
            for (const child of cover.children) {
                child.style.display = 'none';
            }
        }
    }
    document.querySelectorAll('section').forEach((section, i) => {
        if (i !== 0) {
            section.style.display = 'flex';
        }
    });
    return document.documentElement.outerHTML;
}
"""

SHOW_ALL_SECTIONS_JS = """
() => {
    document.querySelectorAll('section').forEach((section) => {
        if (!section.hasAttribute('data-projection-display')) {
            section.setAttribute('data-projection-display', section.style.display);
        }
        section.style.display = 'flex';
    });
}
"""

RESTORE_SECTIONS_JS = """
() => {
    document.querySelectorAll('section[data-projection-display]').forEach((section) => {
        section.style.display = section.getAttribute('data-projection-display');
        section.removeAttribute('data-projection-display');
        if (section.getAttribute('style') === '') {
            section.removeAttribute('style');
        }
    });
}
"""

HEADER_FOOTER_JS = """
({headerId, footerId}) => {
    const header = document.getElementById(headerId);
    const footer = document.getElementById(footerId);
    return [header ? header.outerHTML : null, footer ? footer.outerHTML : null];
}
"""

TOC_TITLES_JS = """
(tocId) => {
    const toc = document.getElementById(tocId);
    if (!toc) {
        return null;
    }
    return Array.from(toc.children).map((item) => {
        const link = item.children[0];
        if (!link) {
            return '';
        }
        const title = link.cloneNode(true);
        title.querySelectorAll('[data-toc-injected]').forEach((node) => node.remove());
        return title.textContent;
    });
}
"""

# Spans added by a previous run carry data-toc-injected and are replaced.
INJECT_PAGE_NUMBERS_JS = """
({tocId, dotsClass, placements}) => {
    const toc = document.getElementById(tocId);
    if (!toc) {
        return false;
    }
    toc.querySelectorAll('[data-toc-injected]').forEach((node) => node.remove());
    placements.forEach(({index, page, className}) => {
        const item = toc.children[index];
        if (!item) {
            return;
        }
        const link = item.querySelector('a');
        if (!link) {
            return;
        }
        const dots = document.createElement('span');
        dots.className = dotsClass;
        dots.setAttribute('data-toc-injected', '');
        const pageNumber = document.createElement('span');
        pageNumber.className = className;
        pageNumber.setAttribute('data-toc-injected', '');
        pageNumber.textContent = String(page);
        link.appendChild(dots);
        link.appendChild(pageNumber);
    });
    return true;
}
"""

TOTAL_PAGES_JS = """
({selector, count}) => {
    const nodes = document.querySelectorAll(selector);
    nodes.forEach((node) => {
        node.textContent = String(count);
    });
    return nodes.length;
}
"""


# ============================================================================
# PROJECTION INTERFACE
# ============================================================================

class DomProjection(ABC):
    """
    Narrow interface over the browser-scripting boundary.

    Implemented once per DOM contract; tests replace it with fakes.
    """

    def __init__(self, contract: Optional[DomContract] = None):
        self.contract = contract or DomContract()

    @abstractmethod
    async def project(self, page: PageHandle, kind: ProjectionKind, extra_pages: int = 0) -> Projection:
        pass

    @abstractmethod
    async def show_all_sections(self, page: PageHandle) -> None:
        pass

    @abstractmethod
    async def restore_sections(self, page: PageHandle) -> None:
        """Give every section back the inline display it had before any projection."""
        pass

    @abstractmethod
    async def standard_header_footer(self, page: PageHandle) -> Tuple[str, str]:
        pass

    @abstractmethod
    async def toc_titles(self, page: PageHandle) -> Optional[List[str]]:
        """Titles of the TOC entries in order, or None when there is no TOC."""
        pass

    @abstractmethod
    async def inject_page_numbers(self, page: PageHandle, placements: Sequence[Dict[str, Any]]) -> bool:
        pass

    @abstractmethod
    async def set_total_pages(self, page: PageHandle, count: int) -> int:
        pass


class ReportDomProjection(DomProjection):
    """DOM projections for the report template described by a ``DomContract``."""

    COVER_HEADER_MISSING = "<div>header first page missing</div>"
    COVER_FOOTER_MISSING = "<div>footer first page missing</div>"
    HEADER_MISSING = "<div>header missing</div>"
    FOOTER_MISSING = "<div>footer missing</div>"

    async def project(self, page: PageHandle, kind: ProjectionKind, extra_pages: int = 0) -> Projection:
        c = self.contract
        if kind == ProjectionKind.COVER:
            html, header, footer = await page.evaluate(COVER_PROJECTION_JS, {
                "coverId": c.cover_section_id,
                "headerId": c.first_page_header_id,
                "footerId": c.first_page_footer_id,
            })
            if header is None:
                logger.warning(f"Cover header '#{c.first_page_header_id}' not found, using placeholder")
                header = self.COVER_HEADER_MISSING
            if footer is None:
                logger.warning(f"Cover footer '#{c.first_page_footer_id}' not found, using placeholder")
                footer = self.COVER_FOOTER_MISSING
            return Projection(kind=kind, html=html, aux_html=[header, footer])

        if kind == ProjectionKind.BODY:
            html = await page.evaluate(BODY_PROJECTION_JS, {
                "coverId": c.cover_section_id,
                "extraPages": extra_pages,
            })
            return Projection(kind=kind, html=html)

        raise ValueError(f"Unknown projection kind: {kind}")

    async def show_all_sections(self, page: PageHandle) -> None:
        await page.evaluate(SHOW_ALL_SECTIONS_JS)

    async def restore_sections(self, page: PageHandle) -> None:
        await page.evaluate(RESTORE_SECTIONS_JS)

    async def standard_header_footer(self, page: PageHandle) -> Tuple[str, str]:
        c = self.contract
        header, footer = await page.evaluate(HEADER_FOOTER_JS, {
            "headerId": c.header_id,
            "footerId": c.footer_id,
        })
        if header is None:
            logger.warning(f"Header '#{c.header_id}' not found, using placeholder")
            header = self.HEADER_MISSING
        if footer is None:
            logger.warning(f"Footer '#{c.footer_id}' not found, using placeholder")
            footer = self.FOOTER_MISSING
        return header, footer

    async def toc_titles(self, page: PageHandle) -> Optional[List[str]]:
        return await page.evaluate(TOC_TITLES_JS, self.contract.toc_container_id)

    async def inject_page_numbers(self, page: PageHandle, placements: Sequence[Dict[str, Any]]) -> bool:
        return await page.evaluate(INJECT_PAGE_NUMBERS_JS, {
            "tocId": self.contract.toc_container_id,
            "dotsClass": self.contract.dots_class,
            "placements": list(placements),
        })

    async def set_total_pages(self, page: PageHandle, count: int) -> int:
        return await page.evaluate(TOTAL_PAGES_JS, {
            "selector": f".{self.contract.total_pages_class}",
            "count": count,
        })
