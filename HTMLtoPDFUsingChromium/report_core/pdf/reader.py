"""
PDF Text Reader
===============

Read-only view of a rendered PDF: page count and, per page, the ordered
text runs emitted by the page's content stream.

A run is a PyMuPDF span. Runs follow content-stream order and may split a
word in two, so callers must concatenate runs before substring matching.
"""

from typing import List
import logging

import fitz  # PyMuPDF

from ..errors import PdfParseError

logger = logging.getLogger(__name__)


def open_pdf(buffer: bytes) -> "fitz.Document":
    """Open a PDF byte buffer with PyMuPDF, raising PdfParseError on failure."""
    if not buffer:
        raise PdfParseError("Cannot parse an empty PDF buffer")
    try:
        doc = fitz.open(stream=bytes(buffer), filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise PdfParseError(f"Invalid PDF buffer: {e}") from e
    if doc.page_count == 0:
        doc.close()
        raise PdfParseError("PDF buffer contains no pages")
    return doc


class PdfTextDocument:
    """
    Parsed PDF exposing its text runs page by page.

    Pages are addressed by physical page number (1-based), matching the
    page numbers printed in the table of contents.

    Example:
        with parse_pdf(buffer) as pdf:
            for page_nb in range(1, pdf.page_count + 1):
                runs = pdf.get_page_text(page_nb)
    """

    def __init__(self, doc: "fitz.Document"):
        self._doc = doc

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def get_page_text(self, page_nb: int) -> List[str]:
        """Return the text runs of physical page ``page_nb`` in stream order."""
        if page_nb < 1 or page_nb > self.page_count:
            raise IndexError(f"Page {page_nb} out of range (1-{self.page_count})")

        page = self._doc[page_nb - 1]
        text_dict = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)

        runs = []
        for block in text_dict.get("blocks", []):
            if block.get("type") != 0:  # images
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if text:
                        runs.append(text)
        return runs

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "PdfTextDocument":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self):
        return f"PdfTextDocument(pages={self.page_count})"


def parse_pdf(buffer: bytes) -> PdfTextDocument:
    """Parse a PDF buffer into a ``PdfTextDocument``."""
    doc = open_pdf(buffer)
    logger.debug(f"Parsed PDF buffer: {doc.page_count} pages, {len(buffer)} bytes")
    return PdfTextDocument(doc)
