"""
Pipeline tests with an in-memory renderer.

Run with: pytest HTMLtoPDFUsingChromium/tests/test_pipeline.py -v
"""

import pytest

from HTMLtoPDFUsingChromium.pdf_orchestrator import DocumentPipeline
from HTMLtoPDFUsingChromium.report_core.errors import MergeError, RenderError
from HTMLtoPDFUsingChromium.report_core.pdf.reader import parse_pdf
from HTMLtoPDFUsingChromium.tests.fakes import FakePool, FakeProjection, make_pdf
from HTMLtoPDFUsingChromium.toc_injector import update_page_count, update_table_of_content

REPORT = "<html>REPORT</html>"
TITLES = ["Introduction", "1. Scope", "2. Method"]


def renders(cover_pages=1):
    """PDF buffers for the source document and both projections."""
    overflow = [[f"Cover overflow {n}"] for n in range(1, cover_pages)]
    return {
        REPORT: make_pdf(
            [["Cover"]] + overflow
            + [["Contents", *TITLES], ["Introduction"], ["1. Scope"], ["2. Method"]]
        ),
        FakeProjection.COVER_HTML: make_pdf([["Cover page"]] + overflow),
        FakeProjection.BODY_HTML: make_pdf(
            [[]] + overflow + [["Contents"], ["Introduction"], ["1. Scope"], ["2. Method"]]
        ),
    }


def texts(buffer):
    with parse_pdf(buffer) as pdf:
        return ["".join(pdf.get_page_text(n)) for n in range(1, pdf.page_count + 1)]


class TestGenerateHtml:
    """Tests for DocumentPipeline.generate_html."""

    @pytest.mark.asyncio
    async def test_numbers_table_of_content(self, config):
        projection = FakeProjection(titles=TITLES)
        pipeline = DocumentPipeline(FakePool(renders()), config, projection)

        html = await pipeline.generate_html(REPORT)

        assert html == REPORT
        assert projection.total_pages == 5
        assert projection.placements == [
            {"index": 0, "page": 3, "className": "title-page-number"},
            {"index": 1, "page": 4, "className": "subtitle-page-number"},
            {"index": 2, "page": 5, "className": "subtitle-page-number"},
        ]

    @pytest.mark.asyncio
    async def test_sections_restored_before_serializing(self, config):
        projection = FakeProjection(titles=TITLES)
        await DocumentPipeline(FakePool(renders()), config, projection).generate_html(REPORT)
        assert projection.sections_shown == 1
        assert projection.sections_restored == 1

    @pytest.mark.asyncio
    async def test_pdf_render_keeps_sections_forced(self, config):
        """Only the serialized HTML gets the authored section display back."""
        projection = FakeProjection(titles=TITLES)
        await DocumentPipeline(FakePool(renders()), config, projection).generate_pdf(REPORT)
        assert projection.sections_restored == 0

    @pytest.mark.asyncio
    async def test_missing_toc_still_counts_pages(self, config):
        projection = FakeProjection(titles=None)
        html = await DocumentPipeline(FakePool(renders()), config, projection).generate_html(REPORT)
        assert html == REPORT
        assert projection.placements is None
        assert projection.total_pages == 5

    @pytest.mark.asyncio
    async def test_pages_closed(self, config):
        pool = FakePool(renders())
        await DocumentPipeline(pool, config, FakeProjection(titles=TITLES)).generate_html(REPORT)
        (session,) = pool.sessions
        assert len(session.pages) == 2
        assert all(page.closed for page in session.pages)


class TestGeneratePdf:
    """Tests for DocumentPipeline.generate_pdf."""

    @pytest.mark.asyncio
    async def test_cover_merged_onto_body(self, config):
        pipeline = DocumentPipeline(FakePool(renders()), config, FakeProjection(titles=TITLES))

        pdf = await pipeline.generate_pdf(REPORT)

        assert texts(pdf) == ["Cover page", "Contents", "Introduction", "1. Scope", "2. Method"]

    @pytest.mark.asyncio
    async def test_render_options(self, config):
        pool = FakePool(renders())
        await DocumentPipeline(pool, config, FakeProjection(titles=TITLES)).generate_pdf(REPORT)

        source, render_page = pool.sessions[0].pages
        (preliminary,) = source.pdf_calls
        cover_count, cover, body = render_page.pdf_calls

        assert preliminary.margin_top == "20mm" and preliminary.header_template == ""
        assert cover_count.margin_top == "20mm" and cover_count.footer_template == ""
        assert cover.margin_top == "20mm"
        assert cover.margin_bottom == "25mm"
        assert cover.header_template == "<div>cover header</div>"
        assert cover.footer_template == "<div>cover footer</div>"
        assert body.margin_top == "35mm"
        assert body.margin_bottom == "25mm"
        assert body.header_template == "<div>header</div>"
        assert body.footer_template == "<div>footer</div>"
        assert body.page_format == "A4" and body.print_background

    @pytest.mark.asyncio
    async def test_overflowing_cover(self, config):
        """A two-page cover shifts the titles and is trimmed to one page."""
        projection = FakeProjection(titles=TITLES)
        pipeline = DocumentPipeline(FakePool(renders(cover_pages=2)), config, projection)

        pdf = await pipeline.generate_pdf(REPORT)

        assert projection.body_extra_pages == 1
        pages = texts(pdf)
        assert len(pages) == 6
        assert pages[0] == "Cover page"
        # Contents listing (page 3) only marks titles as seen
        assert [p["page"] for p in projection.placements] == [4, 5, 6]

    @pytest.mark.asyncio
    async def test_debug_html_written(self, config, tmp_path):
        config.output.debug_html_path = tmp_path / "output.html"
        pipeline = DocumentPipeline(FakePool(renders()), config, FakeProjection(titles=TITLES))
        await pipeline.generate_pdf(REPORT)
        assert (tmp_path / "output.html").read_text() == FakeProjection.BODY_HTML

    @pytest.mark.asyncio
    async def test_render_failure_propagates(self, config):
        class FailingProjection(FakeProjection):
            async def toc_titles(self, page):
                raise RenderError("evaluate failed")

        pool = FakePool(renders())
        with pytest.raises(RenderError):
            await DocumentPipeline(pool, config, FailingProjection()).generate_pdf(REPORT)
        assert all(page.closed for page in pool.sessions[0].pages)

    @pytest.mark.asyncio
    async def test_merge_failure_propagates(self, config, monkeypatch):
        from HTMLtoPDFUsingChromium import pdf_orchestrator

        def broken_merge(buffers, extra_pages):
            raise MergeError("boom")

        monkeypatch.setattr(pdf_orchestrator, "merge_pdfs", broken_merge)
        pipeline = DocumentPipeline(FakePool(renders()), config, FakeProjection(titles=TITLES))
        with pytest.raises(MergeError):
            await pipeline.generate_pdf(REPORT)


class TestTocInjector:
    """Tests for update_table_of_content / update_page_count."""

    @pytest.mark.asyncio
    async def test_missing_toc_returns_empty_map(self):
        projection = FakeProjection(titles=None)
        with parse_pdf(renders()[REPORT]) as pdf:
            assert await update_table_of_content(None, pdf, 0, projection) == {}
            assert await update_page_count(None, pdf.page_count, projection)
        assert projection.placements is None
        assert projection.total_pages == 5

    @pytest.mark.asyncio
    async def test_returns_page_map(self):
        projection = FakeProjection(titles=TITLES)
        with parse_pdf(renders()[REPORT]) as pdf:
            result = await update_table_of_content(None, pdf, 0, projection)
        assert result == {3: [0], 4: [1], 5: [2]}

    @pytest.mark.asyncio
    async def test_missing_page_count_node(self):
        projection = FakeProjection(titles=TITLES, total_nodes=0)
        assert await update_page_count(None, 4, projection) is False
        assert projection.total_pages is None
