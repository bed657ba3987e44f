"""
Pipeline Errors
===============

Exception hierarchy shared by the rendering, parsing and merging steps.

Structural problems with the input HTML (missing table of contents,
missing header/footer elements) are not errors: they are logged and
handled with a fallback by the code that detects them.
"""

from pathlib import Path
from typing import Optional, Union


class ReportPDFError(Exception):
    """Base class for all report-to-PDF pipeline errors."""
    pass


class BrowserLaunchError(ReportPDFError):
    """The headless browser could not be started."""
    pass


class RenderError(ReportPDFError):
    """Loading content into a page or printing it to PDF failed."""
    pass


class RenderTimeoutError(RenderError):
    """A navigation or print call did not finish within the configured timeout."""

    def __init__(self, operation: str, timeout_s: float):
        self.operation = operation
        self.timeout_s = timeout_s
        super().__init__(f"{operation} timed out after {timeout_s:g}s")


class PdfParseError(ReportPDFError):
    """A PDF buffer could not be parsed into pages and text."""
    pass


class MergeError(ReportPDFError):
    """The cover/body merge was called with invalid input."""
    pass


class DocumentIOError(ReportPDFError):
    """Reading the source HTML or writing an output file failed."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(f"{message}: {path}" if path is not None else message)
