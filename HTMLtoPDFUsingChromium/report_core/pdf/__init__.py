"""
PDF Utilities
=============

PyMuPDF-based reading and merging of rendered PDF buffers.

Components:
- parse_pdf / PdfTextDocument: Page count and text runs per page
- merge_pdfs: Cover/body merge with artifact page removal
"""

from .reader import (
    PdfTextDocument,
    open_pdf,
    parse_pdf,
)

from .assembler import (
    ARTIFACT_PAGE_INDEX,
    COVER_KEEP_INDEX,
    merge_pdfs,
)

__all__ = [
    # Reading
    "PdfTextDocument",
    "open_pdf",
    "parse_pdf",
    # Merging
    "ARTIFACT_PAGE_INDEX",
    "COVER_KEEP_INDEX",
    "merge_pdfs",
]
