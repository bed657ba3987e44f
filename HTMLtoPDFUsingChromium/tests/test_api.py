"""
API Endpoint Tests for the HTML to PDF service

Run with: pytest HTMLtoPDFUsingChromium/tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from HTMLtoPDFUsingChromium.api import create_app, get_pipeline
from HTMLtoPDFUsingChromium.config import PipelineConfig
from HTMLtoPDFUsingChromium.report_core.errors import RenderError
from HTMLtoPDFUsingChromium.tests.fakes import FakePool

HTML_HEADERS = {"Content-Type": "text/html"}


class StubPipeline:
    """Records calls; returns fixed output or raises ``error``."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def generate_pdf(self, html):
        self.calls.append(("pdf", html))
        if self.error:
            raise self.error
        return b"%PDF-1.7 stub"

    async def generate_html(self, html):
        self.calls.append(("html", html))
        if self.error:
            raise self.error
        return html.replace("</ul>", "<span>3</span></ul>")


@pytest.fixture
def pool():
    return FakePool()


@pytest.fixture
def app(pool):
    config = PipelineConfig()
    config.api.max_body_bytes = 1024
    return create_app(config, pool=pool)


@pytest.fixture
def pipeline(app):
    stub = StubPipeline()
    app.dependency_overrides[get_pipeline] = lambda: stub
    return stub


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


class TestPdfVisualiser:
    """Tests for POST /pdf_visualiser."""

    def test_returns_pdf(self, client, pipeline):
        """A report body is rendered to a PDF response."""
        response = client.post("/pdf_visualiser", content="<html>report</html>", headers=HTML_HEADERS)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content == b"%PDF-1.7 stub"
        assert pipeline.calls == [("pdf", "<html>report</html>")]

    def test_empty_body_rejected(self, client, pipeline):
        """An empty body is rejected without rendering."""
        response = client.post("/pdf_visualiser", content=b"", headers=HTML_HEADERS)
        assert response.status_code == 400
        assert response.text == "Request body is empty."
        assert pipeline.calls == []

    def test_oversized_body_rejected(self, client, pipeline):
        """Bodies above the configured limit are rejected."""
        response = client.post("/pdf_visualiser", content="x" * 2048, headers=HTML_HEADERS)
        assert response.status_code == 413
        assert pipeline.calls == []

    def test_oversized_chunked_body_rejected(self, client, pipeline):
        """Bodies without Content-Length are cut off at the configured limit."""
        chunks = iter([b"x" * 600, b"x" * 600, b"x" * 600])
        response = client.post("/pdf_visualiser", content=chunks, headers=HTML_HEADERS)
        assert response.status_code == 413
        assert pipeline.calls == []

    def test_chunked_body_accepted(self, client, pipeline):
        """Bodies without Content-Length below the limit are rendered."""
        chunks = iter([b"<html>", b"report", b"</html>"])
        response = client.post("/pdf_visualiser", content=chunks, headers=HTML_HEADERS)
        assert response.status_code == 200
        assert pipeline.calls == [("pdf", "<html>report</html>")]

    def test_pipeline_failure(self, app, client, pipeline):
        """A failing render returns 500."""
        pipeline.error = RenderError("pdf failed")
        response = client.post("/pdf_visualiser", content="<html/>", headers=HTML_HEADERS)
        assert response.status_code == 500
        assert response.text == "Error generating PDF"

    def test_report_query_accepted(self, client, pipeline):
        """The report type query parameter is accepted."""
        response = client.post(
            "/pdf_visualiser?report=audit", content="<html/>", headers=HTML_HEADERS
        )
        assert response.status_code == 200


class TestHtmlVisualiser:
    """Tests for POST /html_visualiser."""

    def test_returns_html(self, client, pipeline):
        """The numbered report HTML is returned."""
        response = client.post("/html_visualiser", content="<ul></ul>", headers=HTML_HEADERS)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.text == "<ul><span>3</span></ul>"

    def test_empty_body_rejected(self, client, pipeline):
        """An empty body is rejected without rendering."""
        response = client.post("/html_visualiser", content=b"", headers=HTML_HEADERS)
        assert response.status_code == 400
        assert response.text == "Request body is empty."
        assert pipeline.calls == []

    def test_pipeline_failure(self, client, pipeline):
        pipeline.error = RuntimeError("unexpected")
        response = client.post("/html_visualiser", content="<html/>", headers=HTML_HEADERS)
        assert response.status_code == 500


class TestHealthEndpoint:
    """Tests for /api/v1/health endpoint."""

    def test_health_returns_200(self, client):
        """Health endpoint should return 200."""
        response = client.get("/api/v1/health")
        assert response.status_code == 200

    def test_browser_not_launched_until_first_render(self, client):
        """The browser is started lazily."""
        data = client.get("/api/v1/health").json()
        assert data["status"] == "healthy"
        assert data["browser_open"] is False


class TestInfoEndpoint:
    """Tests for /api/v1/info endpoint."""

    def test_info_contains_version(self, client):
        """Info should contain version and service name."""
        data = client.get("/api/v1/info").json()
        assert "name" in data
        assert data["version"] == "1.0.0"

    def test_info_contains_render_defaults(self, client):
        data = client.get("/api/v1/info").json()
        assert data["rendering"]["page_format"] == "A4"
        assert data["rendering"]["body_margin_top"] == "35mm"
        assert data["max_body_bytes"] == 1024

    def test_info_contains_layout(self, client):
        data = client.get("/api/v1/info").json()
        assert data["layout"]["cover_section_id"] == "presentation"
        assert data["layout"]["toc_container_id"] == "table-of-content"


class TestLifecycle:
    """Tests for application startup/shutdown."""

    def test_pool_closed_on_shutdown(self, app, pool):
        with TestClient(app) as client:
            client.get("/api/v1/health")
        assert pool.closed
