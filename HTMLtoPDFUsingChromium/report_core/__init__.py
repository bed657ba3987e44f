"""
Report Core Library
===================

Reusable building blocks for rendering HTML reports to paginated PDFs:

- Renderer adapters (headless Chromium through Playwright)
- PDF text reading and cover/body merging (PyMuPDF)
- DOM contract, projections and static contract inspection (lxml)
- Error hierarchy

Architecture
------------

    report_core/
    ├── adapters/      - Renderer interfaces and the Chromium implementation
    ├── pdf/           - PDF text reader and assembler
    ├── dom/           - DOM contract, projections, contract inspection
    └── errors.py      - Exception hierarchy

Usage
-----

    from HTMLtoPDFUsingChromium.report_core.adapters import ChromiumRendererPool, RenderOptions
    from HTMLtoPDFUsingChromium.report_core.pdf import parse_pdf, merge_pdfs

    pool = ChromiumRendererPool()
    async with pool.session() as session:
        page = await session.new_page()
        await page.set_content(html)
        buffer = await page.pdf(RenderOptions())

    with parse_pdf(buffer) as pdf:
        print(pdf.page_count, pdf.get_page_text(1))
"""

__version__ = "1.0.0"

from .errors import (
    BrowserLaunchError,
    DocumentIOError,
    MergeError,
    PdfParseError,
    RenderError,
    RenderTimeoutError,
    ReportPDFError,
)

from .adapters import (
    ChromiumRendererPool,
    PageHandle,
    RendererPool,
    RenderOptions,
    RenderSession,
)

from .pdf import (
    PdfTextDocument,
    merge_pdfs,
    parse_pdf,
)

from .dom import (
    DomContract,
    DomProjection,
    Projection,
    ProjectionKind,
    ReportDomProjection,
    inspect_html,
)

__all__ = [
    "__version__",
    # Errors
    "BrowserLaunchError",
    "DocumentIOError",
    "MergeError",
    "PdfParseError",
    "RenderError",
    "RenderTimeoutError",
    "ReportPDFError",
    # Adapters
    "ChromiumRendererPool",
    "PageHandle",
    "RendererPool",
    "RenderOptions",
    "RenderSession",
    # PDF
    "PdfTextDocument",
    "merge_pdfs",
    "parse_pdf",
    # DOM
    "DomContract",
    "DomProjection",
    "Projection",
    "ProjectionKind",
    "ReportDomProjection",
    "inspect_html",
]
