"""
PDF Assembler
=============

Splices the separately rendered cover page onto the body document.

Page positions are fixed by the two-pass rendering technique and by the
HTML template contract:

- The body render starts with the (hidden) cover section, which still
  produces one blank page: physical page 1, index ``ARTIFACT_PAGE_INDEX``.
- When the cover section overflows, the cover render holds the cover page
  at ``COVER_KEEP_INDEX`` followed by ``extra_pages`` overflow pages.
"""

from typing import Sequence
import logging

from ..errors import MergeError
from .reader import open_pdf

logger = logging.getLogger(__name__)

ARTIFACT_PAGE_INDEX = 0
COVER_KEEP_INDEX = 0


def merge_pdfs(pdf_buffers: Sequence[bytes], extra_pages: int = 0) -> bytes:
    """
    Merge a cover PDF and a body PDF into the final document.

    Steps:
        1. Remove the artifact page from the body document.
        2. Remove the ``extra_pages`` overflow pages following the cover page.
        3. Copy the cover page into the body document at index 0.
        4. Serialize the body document.

    Args:
        pdf_buffers: Exactly two buffers, ``[cover_pdf, body_pdf]``
        extra_pages: Number of overflow pages of the cover section

    Returns:
        The merged PDF bytes. Its page count equals the body's page count.

    Raises:
        MergeError: If not given exactly two buffers
        PdfParseError: If a buffer is not a valid PDF
    """
    if len(pdf_buffers) != 2:
        raise MergeError(f"merge_pdfs requires exactly two PDF buffers, got {len(pdf_buffers)}")
    if extra_pages < 0:
        raise MergeError(f"extra_pages must be >= 0, got {extra_pages}")

    cover_doc = open_pdf(pdf_buffers[0])
    try:
        body_doc = open_pdf(pdf_buffers[1])
        try:
            body_doc.delete_page(ARTIFACT_PAGE_INDEX)

            if extra_pages > 0:
                last_overflow = min(COVER_KEEP_INDEX + extra_pages, cover_doc.page_count - 1)
                if last_overflow < COVER_KEEP_INDEX + extra_pages:
                    logger.warning(
                        f"Cover render has {cover_doc.page_count} pages, "
                        f"expected {extra_pages + 1}; trimming what exists"
                    )
                if last_overflow > COVER_KEEP_INDEX:
                    cover_doc.delete_pages(from_page=COVER_KEEP_INDEX + 1, to_page=last_overflow)

            body_doc.insert_pdf(
                cover_doc,
                from_page=COVER_KEEP_INDEX,
                to_page=COVER_KEEP_INDEX,
                start_at=0,
            )
            logger.info(f"Merged cover page into body document ({body_doc.page_count} pages)")
            return body_doc.tobytes(garbage=1, deflate=True)
        finally:
            body_doc.close()
    finally:
        cover_doc.close()
