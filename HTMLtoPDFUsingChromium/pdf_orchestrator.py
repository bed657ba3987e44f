#!/usr/bin/env python3
"""HTML report -> preliminary render -> numbered TOC -> cover/body renders -> merged PDF

This orchestrator:
  1) Loads the report HTML into a headless Chromium page.
  2) Renders the cover section alone to count its overflow ("extra") pages.
  3) Renders the whole document once and parses the PDF text to find the
     page of every table-of-contents title.
  4) Writes the page numbers and the total page count back into the DOM.
  5) Renders the cover page and the body pages as two separately styled PDFs
     (different headers, footers and top margins).
  6) Merges both PDFs: cover page first, artifact page of the body removed.

Usage:
  python -m HTMLtoPDFUsingChromium.pdf_orchestrator html report.html ./output
  python -m HTMLtoPDFUsingChromium.pdf_orchestrator pdf report.pdf ./output

Notes:
  - The `html` action reads <output_path>/rapport.html and writes the
    TOC-numbered HTML to <output_path>/<report_name>.
  - The `pdf` action reads <output_path>/<report_name with .html suffix>
    and writes the merged PDF to <output_path>/<report_name>.
  - Set CHROMIUM_PATH to use a system Chromium instead of Playwright's build.

Outputs:
  - <report_name>.html : Report with page numbers in the table of contents
  - <report_name>.pdf  : Final PDF (cover page + body pages)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import PipelineConfig, get_config, validate_config
from .report_core.adapters.base import PageHandle, RendererPool, RenderOptions, RenderSession
from .report_core.adapters.chromium import ChromiumRendererPool
from .report_core.dom.contract import inspect_html
from .report_core.dom.projection import DomProjection, ProjectionKind, ReportDomProjection
from .report_core.errors import DocumentIOError, ReportPDFError
from .report_core.pdf.assembler import merge_pdfs
from .report_core.pdf.reader import PdfTextDocument, parse_pdf
from .toc_injector import update_page_count, update_table_of_content

logger = logging.getLogger(__name__)


def create_renderer_pool(config: PipelineConfig) -> ChromiumRendererPool:
    """Build the process-wide Chromium pool from configuration (not launched yet)."""
    return ChromiumRendererPool(
        executable_path=config.browser.executable_path,
        args=config.browser.args,
        headless=config.browser.headless,
        user_agent=config.browser.user_agent,
        max_sessions=config.api.max_concurrent_jobs,
        timeout_s=config.rendering.render_timeout_s,
        launch_timeout_s=config.browser.launch_timeout_s,
        wait_until=config.rendering.wait_until,
    )


@dataclass
class PreparedDocument:
    """Loaded report with page numbers injected, ready for the final renders."""
    page: PageHandle
    render_page: PageHandle
    extra_pages: int


class DocumentPipeline:
    """
    Page-numbering and two-pass PDF assembly pipeline.

    Every run opens its own render session (two pages) on the shared pool
    and disposes it when done. Steps run strictly in sequence; any failure
    propagates to the caller without retry.

    Args:
        pool: Shared renderer, owned by the caller
        config: Pipeline configuration (global configuration if None)
        projection: DOM projections for the report template
    """

    def __init__(
        self,
        pool: RendererPool,
        config: Optional[PipelineConfig] = None,
        projection: Optional[DomProjection] = None,
    ):
        self.pool = pool
        self.config = config or get_config()
        self.projection = projection or ReportDomProjection(self.config.layout)

    # ------------------------------------------------------------------
    # Render options
    # ------------------------------------------------------------------

    def _base_options(self) -> RenderOptions:
        rendering = self.config.rendering
        return RenderOptions(
            page_format=rendering.page_format,
            margin_top=rendering.cover_margin_top,
            margin_bottom=rendering.margin_bottom,
            print_background=rendering.print_background,
            display_header_footer=True,
            prefer_css_page_size=rendering.prefer_css_page_size,
        )

    @property
    def preliminary_options(self) -> RenderOptions:
        """Options of the measuring renders: cover margins, empty templates."""
        return self._base_options()

    def cover_options(self, header: str, footer: str) -> RenderOptions:
        return self._base_options().with_templates(header, footer)

    def body_options(self, header: str, footer: str) -> RenderOptions:
        return (
            self._base_options()
            .with_margins(top=self.config.rendering.body_margin_top)
            .with_templates(header, footer)
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def generate_html(self, html: str) -> str:
        """Return the report HTML with TOC page numbers and total page count filled in."""
        self._inspect(html)
        async with self.pool.session() as session:
            prepared = await self._prepare(session, html)
            await self.projection.restore_sections(prepared.page)
            return await prepared.page.content()

    async def generate_pdf(self, html: str) -> bytes:
        """Return the final merged PDF for the report HTML."""
        self._inspect(html)
        async with self.pool.session() as session:
            prepared = await self._prepare(session, html)

            logger.info("--- Generating PDF part 1 (cover) ---")
            cover_pdf = await self._render_cover(prepared)
            logger.info("--- Generating PDF part 2 (body) ---")
            body_pdf = await self._render_body(prepared)

        logger.info("Merging cover and body PDFs")
        return await asyncio.to_thread(merge_pdfs, [cover_pdf, body_pdf], prepared.extra_pages)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _inspect(self, html: str) -> None:
        report = inspect_html(html, self.config.layout)
        report.log()
        logger.debug(
            f"Report has {report.section_count} sections and {report.toc_entry_count} TOC entries"
        )

    async def _parse(self, buffer: bytes) -> PdfTextDocument:
        return await asyncio.to_thread(parse_pdf, buffer)

    async def _prepare(self, session: RenderSession, html: str) -> PreparedDocument:
        logger.info(f"Chrome version: {await self.pool.version()}")

        page = await session.new_page()
        await page.set_content(html)
        render_page = await session.new_page()

        extra_pages = await self._probe_extra_pages(page, render_page)

        logger.info("Generating preliminary PDF for page number analysis...")
        buffer = await page.pdf(self.preliminary_options)
        logger.info("Preliminary PDF generated in memory, parsing...")

        pdf = await self._parse(buffer)
        with pdf:
            logger.info(f"Preliminary PDF parsed. Pages count: {pdf.page_count}")
            await update_page_count(page, pdf.page_count, self.projection)
            await update_table_of_content(page, pdf, extra_pages, self.projection)

        return PreparedDocument(
            page=page,
            render_page=render_page,
            extra_pages=extra_pages,
        )

    async def _probe_extra_pages(self, page: PageHandle, render_page: PageHandle) -> int:
        """Render the cover section alone and count pages beyond the first."""
        cover = await self.projection.project(page, ProjectionKind.COVER)
        await render_page.set_content(cover.html)
        await self.projection.show_all_sections(page)

        logger.info("Generating cover-only PDF to measure cover overflow...")
        buffer = await render_page.pdf(self.preliminary_options)
        pdf = await self._parse(buffer)
        with pdf:
            extra_pages = max(pdf.page_count - 1, 0)
        logger.info(f"Cover section spans {extra_pages + 1} page(s)")
        return extra_pages

    async def _render_cover(self, prepared: PreparedDocument) -> bytes:
        cover = await self.projection.project(prepared.page, ProjectionKind.COVER)
        await prepared.render_page.set_content(cover.html)
        buffer = await prepared.render_page.pdf(self.cover_options(cover.header, cover.footer))
        logger.info(f"PDF buffer for cover generated ({len(buffer)} bytes)")
        return buffer

    async def _render_body(self, prepared: PreparedDocument) -> bytes:
        body = await self.projection.project(prepared.page, ProjectionKind.BODY, prepared.extra_pages)

        debug_path = self.config.output.debug_html_path
        if debug_path:
            Path(debug_path).write_text(body.html, encoding="utf-8")
            logger.debug(f"Body projection written to {debug_path}")

        await prepared.render_page.set_content(body.html)
        header, footer = await self.projection.standard_header_footer(prepared.render_page)
        buffer = await prepared.render_page.pdf(self.body_options(header, footer))
        logger.info(f"PDF buffer for body generated ({len(buffer)} bytes)")
        return buffer


# ============================================================================
# FILE-BASED ENTRY POINTS
# ============================================================================

def read_report(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentIOError(f"Failed to read input HTML ({e.strerror})", path) from e


def write_output(path: Path, data) -> None:
    try:
        if isinstance(data, bytes):
            path.write_bytes(data)
        else:
            path.write_text(data, encoding="utf-8")
    except OSError as e:
        raise DocumentIOError(f"Failed to write output ({e.strerror})", path) from e


def html_output_paths(report_name: str, output_path: Path, config: PipelineConfig) -> tuple[Path, Path]:
    return output_path / config.output.report_html, output_path / report_name


def pdf_output_paths(report_name: str, output_path: Path) -> tuple[Path, Path]:
    # The PDF action consumes the HTML written by the html action.
    return output_path / Path(report_name).with_suffix(".html").name, output_path / report_name


async def create_html_file(pipeline: DocumentPipeline, report_name: str, output_path: Path) -> Path:
    source, target = html_output_paths(report_name, output_path, pipeline.config)
    logger.info(f"Generating intermediate HTML from {source}")
    html = read_report(source)
    write_output(target, await pipeline.generate_html(html))
    logger.info(f"Final HTML with updated TOC saved to: {target}")
    return target


async def create_pdf_file(pipeline: DocumentPipeline, report_name: str, output_path: Path) -> Path:
    source, target = pdf_output_paths(report_name, output_path)
    logger.info(f"Reading final HTML from: {source}")
    html = read_report(source)
    write_output(target, await pipeline.generate_pdf(html))
    logger.info(f"Final merged PDF saved successfully: {target}")
    return target


async def run(action: str, report_name: str, output_path: Path, config: PipelineConfig,
              pool: Optional[RendererPool] = None) -> Path:
    """Run one CLI action; the pool is closed afterwards when created here."""
    owns_pool = pool is None
    pool = pool or create_renderer_pool(config)
    pipeline = DocumentPipeline(pool, config)
    try:
        if action == "html":
            return await create_html_file(pipeline, report_name, output_path)
        return await create_pdf_file(pipeline, report_name, output_path)
    finally:
        if owns_pool:
            await pool.close_all()


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Render an HTML report to a paginated PDF with a numbered table of contents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Number the table of contents of ./output/rapport.html:
    python -m HTMLtoPDFUsingChromium.pdf_orchestrator html report.html ./output

  Render ./output/report.html to ./output/report.pdf:
    python -m HTMLtoPDFUsingChromium.pdf_orchestrator pdf report.pdf ./output

Environment Variables:
  CHROMIUM_PATH          - Chromium/Chrome executable (optional)
  HTMLTOPDF_RENDER_TIMEOUT - Seconds allowed per render call (default: 120)
        """
    )
    ap.add_argument("action", choices=["html", "pdf"], help="Output to generate")
    ap.add_argument("report_name", help="Output file name (e.g. report.pdf)")
    ap.add_argument("output_path", help="Directory holding the input and output files")
    ap.add_argument("--config", default=None, help="JSON configuration file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = PipelineConfig.from_file(args.config) if args.config else get_config()
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    try:
        output = asyncio.run(run(args.action, args.report_name, Path(args.output_path), config))
    except ReportPDFError as e:
        logger.error(f"Error generating {args.action.upper()}: {e}")
        return 1
    except Exception:
        logger.exception(f"Unhandled error generating {args.action.upper()}")
        return 1

    logger.info(f"{args.action.upper()} generated successfully: {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
