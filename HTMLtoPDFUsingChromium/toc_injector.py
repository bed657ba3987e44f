#!/usr/bin/env python3
"""
TOC Injector

Writes the located page numbers back into the loaded report:

- every located TOC entry's link gets a leader-dots span and a page-number
  span (``title-page-number`` or ``subtitle-page-number``);
- every ``.totalPages`` node gets the page count of the preliminary render.

A report without a table of contents or page-count node still renders;
the missing element is only logged.
"""

from typing import Dict, List
import logging

from .report_core.adapters.base import PageHandle
from .report_core.dom.projection import DomProjection
from .toc_page_locator import (
    PageTextSource,
    build_toc_entries,
    find_page_number,
    page_number_placements,
)

logger = logging.getLogger(__name__)


async def update_table_of_content(
    page: PageHandle,
    pdf: PageTextSource,
    extra_pages: int,
    projection: DomProjection,
) -> Dict[int, List[int]]:
    """
    Locate every TOC title in ``pdf`` and inject the page numbers into ``page``.

    Returns:
        The page map used for injection (empty when the TOC is missing)
    """
    logger.info("Updating table of contents")
    titles = await projection.toc_titles(page)
    if titles is None:
        logger.warning("Table of contents not found, page numbers skipped")
        return {}

    entries = build_toc_entries(titles)
    titles_pages = find_page_number(pdf, titles, extra_pages)

    placements = page_number_placements(
        entries,
        titles_pages,
        title_class=projection.contract.title_page_number_class,
        subtitle_class=projection.contract.subtitle_page_number_class,
    )

    if not await projection.inject_page_numbers(page, placements):
        logger.warning("Table of contents disappeared before injection, page numbers skipped")
        return {}

    logger.info(f"Table of contents updated: {len(placements)}/{len(entries)} entries numbered")
    return titles_pages


async def update_page_count(page: PageHandle, count: int, projection: DomProjection) -> bool:
    """Write ``count`` into the total-page-count node(s). Returns False if none exist."""
    logger.info("Updating total page count")
    updated = await projection.set_total_pages(page, count)
    if not updated:
        logger.warning("Total page count node not found, page count skipped")
        return False
    logger.info(f"Total page count set to {count}")
    return True
