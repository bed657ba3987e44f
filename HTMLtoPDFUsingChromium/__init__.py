"""
HTML to PDF Report Pipeline

Renders structured HTML reports to paginated PDFs with headless Chromium:
the table of contents gets real page numbers, the cover page gets its own
header and footer, and the two renders are merged into one document.

Main Components:
- pdf_orchestrator: Pipeline orchestration and CLI
- api: HTTP front end (FastAPI)
- toc_page_locator / toc_injector: Table-of-contents page numbering
- report_core: Renderer adapters, PDF reading/merging, DOM projections

Example Usage:
    # CLI usage
    python -m HTMLtoPDFUsingChromium.pdf_orchestrator pdf report.pdf ./output

    # Programmatic usage
    from HTMLtoPDFUsingChromium.pdf_orchestrator import DocumentPipeline, create_renderer_pool
    pool = create_renderer_pool(config)
    pdf_bytes = await DocumentPipeline(pool, config).generate_pdf(html)
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
