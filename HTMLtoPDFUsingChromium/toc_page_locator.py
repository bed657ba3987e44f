#!/usr/bin/env python3
"""
TOC Page Locator

Finds the physical page on which each table-of-contents title appears in a
preliminary render of the report.

The report template puts the cover on page 1 and the table of contents on
page 2, so scanning starts at page 3. Titles are located by plain substring
matching on the concatenated text runs of each page:

- the accumulated text is reset at the start of every page and after every
  match, so a title cannot be matched twice from the same text;
- each TOC entry is assigned to the first page it (really) appears on;
- when the cover overflows onto extra pages, the contents listing itself
  is pushed past page 2 and would be the first match of every title, so
  the first occurrence of each title is only marked as seen.

Usage:
    from HTMLtoPDFUsingChromium.toc_page_locator import find_page_number
    from HTMLtoPDFUsingChromium.report_core.pdf import parse_pdf

    with parse_pdf(buffer) as pdf:
        titles_pages = find_page_number(pdf, ["Introduction", "1. Scope"], extra_pages=0)
    # {3: [0], 4: [1]}
"""

from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence, Set
import logging

logger = logging.getLogger(__name__)

COVER_PAGE_COUNT = 2  # Cover page + table of contents page
FIRST_CONTENT_PAGE = COVER_PAGE_COUNT + 1


class PageTextSource(Protocol):
    """Anything exposing a page count and per-page text runs (1-based pages)."""

    @property
    def page_count(self) -> int: ...

    def get_page_text(self, page_nb: int) -> List[str]: ...


@dataclass(frozen=True)
class TocEntry:
    """One line of the table of contents."""
    index: int
    title: str

    @property
    def is_subtitle(self) -> bool:
        # "1.2 Method" style numbering marks a sub-entry
        return "." in self.title


def build_toc_entries(titles: Sequence[str]) -> List[TocEntry]:
    return [TocEntry(index=i, title=title) for i, title in enumerate(titles)]


def find_page_number(
    pdf: PageTextSource,
    table_of_content: Sequence[str],
    extra_pages: int = 0,
    first_page: int = FIRST_CONTENT_PAGE,
) -> Dict[int, List[int]]:
    """
    Map physical page numbers to the indices of TOC titles first found there.

    Args:
        pdf: Parsed preliminary render
        table_of_content: TOC titles in source order
        extra_pages: Overflow pages of the cover section (0 = cover fits one page)
        first_page: First physical page to scan

    Returns:
        {page_number: [toc_index, ...]}, pages in increasing order, indices in
        match order. Titles never found are absent.
    """
    titles_pages: Dict[int, List[int]] = {}
    recorded: Set[int] = set()
    seen: Set[int] = set()

    for page_nb in range(first_page, pdf.page_count + 1):
        scrap_text = ""
        for run in pdf.get_page_text(page_nb):
            scrap_text += run.replace("\n", "")

            for index, title in enumerate(table_of_content):
                if not title or index in recorded:
                    continue
                if title not in scrap_text:
                    continue

                if extra_pages > 0 and index not in seen:
                    seen.add(index)
                else:
                    recorded.add(index)
                    titles_pages.setdefault(page_nb, []).append(index)

                scrap_text = ""

    missing = len([t for t in table_of_content if t]) - len(recorded)
    if missing:
        logger.debug(f"{missing} TOC title(s) not located in the preliminary render")
    return titles_pages


def page_number_placements(
    entries: Sequence[TocEntry],
    titles_pages: Dict[int, List[int]],
    title_class: str = "title-page-number",
    subtitle_class: str = "subtitle-page-number",
) -> List[Dict[str, object]]:
    """
    Flatten a page map into one placement per located TOC entry.

    Each placement is ``{"index", "page", "className"}``, ready to be sent to
    the browser-side injection script.
    """
    by_index = {entry.index: entry for entry in entries}
    placements = []
    for page_nb in sorted(titles_pages):
        for index in titles_pages[page_nb]:
            entry = by_index.get(index)
            if entry is None:
                continue
            placements.append({
                "index": index,
                "page": page_nb,
                "className": subtitle_class if entry.is_subtitle else title_class,
            })
    return placements
