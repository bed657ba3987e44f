#!/usr/bin/env python3
"""
HTML Report Rendering REST API

This module provides a FastAPI-based REST API exposing the report pipeline
to other services. It supports:

- Rendering a report to the final merged PDF
- Returning the report HTML with its table of contents numbered
- Health and configuration endpoints for monitoring

API Flow:
1. POST /pdf_visualiser  - text/html body, returns application/pdf
2. POST /html_visualiser - text/html body, returns text/html

Both endpoints run the whole pipeline synchronously within the request.
Concurrent requests share one headless Chromium; at most
``api.max_concurrent_jobs`` render at once, the others wait for a slot.

Usage:
    # Start the API server
    uvicorn HTMLtoPDFUsingChromium.api:app --host 0.0.0.0 --port 8080

    # Or programmatically
    from HTMLtoPDFUsingChromium.api import create_app
    app = create_app()
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from pydantic import BaseModel, Field

from . import __version__
from .config import PipelineConfig, get_config
from .pdf_orchestrator import DocumentPipeline, create_renderer_pool
from .report_core.adapters.base import RendererPool

logger = logging.getLogger(__name__)

EMPTY_BODY_MESSAGE = "Request body is empty."
PIPELINE_ERROR_MESSAGE = "Error generating PDF"


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class HealthStatus(BaseModel):
    """Service health."""
    status: str
    timestamp: str
    browser_open: bool


class RenderDefaults(BaseModel):
    """Render options applied to every report."""
    page_format: str
    cover_margin_top: str
    body_margin_top: str
    margin_bottom: str
    render_timeout_s: float


class ServiceInfo(BaseModel):
    """API configuration and capabilities."""
    name: str = "HTML to PDF Report API"
    version: str
    max_concurrent_jobs: int
    max_body_bytes: int
    rendering: RenderDefaults
    layout: Dict[str, Any] = Field(default_factory=dict)
    endpoints: List[str] = Field(default_factory=list)


# ============================================================================
# DEPENDENCIES
# ============================================================================

def get_pipeline(request: Request) -> DocumentPipeline:
    """Pipeline bound to the application's shared renderer pool."""
    return request.app.state.pipeline


async def _read_report(request: Request, max_body_bytes: int) -> Optional[Response]:
    """
    Read and check the raw request body.

    Returns an error response for empty or oversized bodies, otherwise stores
    the decoded HTML on ``request.state.html`` and returns None.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_body_bytes:
        return PlainTextResponse("Request body too large.", status_code=413)

    # Chunked bodies carry no Content-Length; stop reading past the limit.
    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_body_bytes:
            return PlainTextResponse("Request body too large.", status_code=413)
        chunks.append(chunk)

    body = b"".join(chunks)
    if not body:
        return PlainTextResponse(EMPTY_BODY_MESSAGE, status_code=400)

    request.state.html = body.decode("utf-8", errors="replace")
    return None


# ============================================================================
# API ENDPOINTS
# ============================================================================

def create_app(config: Optional[PipelineConfig] = None, pool: Optional[RendererPool] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Pipeline configuration (global configuration if None)
        pool: Renderer pool; a Chromium pool is created if None. The browser
              itself is only launched by the first render.
    """
    config = config or get_config()
    pool = pool or create_renderer_pool(config)

    app = FastAPI(
        title="HTML to PDF Report API",
        description="""
REST API rendering HTML reports to paginated PDFs.

## Workflow

1. **Render PDF**: `POST /pdf_visualiser` - HTML body, returns the merged PDF
2. **Number TOC**: `POST /html_visualiser` - HTML body, returns the HTML with
   table-of-contents page numbers and the total page count filled in

The optional `report` query parameter is accepted for compatibility.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.config = config
    app.state.pool = pool
    app.state.pipeline = DocumentPipeline(pool, config)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Closing renderer pool")
        await app.state.pool.close_all()

    # ========================================================================
    # RENDERING ENDPOINTS
    # ========================================================================

    @app.post("/pdf_visualiser", tags=["Rendering"], response_class=Response)
    async def pdf_visualiser(
        request: Request,
        report: Optional[str] = Query(default=None, description="Report type (informational)"),
        pipeline: DocumentPipeline = Depends(get_pipeline),
    ):
        """Render the posted report HTML to the final merged PDF."""
        rejected = await _read_report(request, config.api.max_body_bytes)
        if rejected is not None:
            return rejected

        logger.info(f"PDF requested (report={report})")
        try:
            pdf = await pipeline.generate_pdf(request.state.html)
        except Exception:
            logger.exception("Error generating PDF")
            return PlainTextResponse(PIPELINE_ERROR_MESSAGE, status_code=500)

        return Response(content=pdf, media_type="application/pdf")

    @app.post("/html_visualiser", tags=["Rendering"], response_class=Response)
    async def html_visualiser(
        request: Request,
        report: Optional[str] = Query(default=None, description="Report type (informational)"),
        pipeline: DocumentPipeline = Depends(get_pipeline),
    ):
        """Return the posted report HTML with its table of contents numbered."""
        rejected = await _read_report(request, config.api.max_body_bytes)
        if rejected is not None:
            return rejected

        logger.info(f"HTML requested (report={report})")
        try:
            html = await pipeline.generate_html(request.state.html)
        except Exception:
            logger.exception("Error generating HTML")
            return PlainTextResponse(PIPELINE_ERROR_MESSAGE, status_code=500)

        return Response(content=html, media_type="text/html")

    # ========================================================================
    # SYSTEM ENDPOINTS
    # ========================================================================

    @app.get("/api/v1/health", response_model=HealthStatus, tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return HealthStatus(
            status="healthy",
            timestamp=datetime.now().isoformat(),
            browser_open=app.state.pool.is_open,
        )

    @app.get("/api/v1/info", response_model=ServiceInfo, tags=["System"])
    async def get_info():
        """Get API configuration and capabilities."""
        rendering = config.rendering
        return ServiceInfo(
            version=__version__,
            max_concurrent_jobs=config.api.max_concurrent_jobs,
            max_body_bytes=config.api.max_body_bytes,
            rendering=RenderDefaults(
                page_format=rendering.page_format,
                cover_margin_top=rendering.cover_margin_top,
                body_margin_top=rendering.body_margin_top,
                margin_bottom=rendering.margin_bottom,
                render_timeout_s=rendering.render_timeout_s,
            ),
            layout=config.layout.to_dict(),
            endpoints=["/pdf_visualiser", "/html_visualiser"],
        )

    return app


def serve(config: Optional[PipelineConfig] = None) -> None:
    """Run the API with uvicorn on the configured host and port."""
    import uvicorn

    config = config or get_config()
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    logger.info(f"PDF visualiser server listening on port {config.api.port}")
    uvicorn.run(create_app(config), host=config.api.host, port=config.api.port)


# Create default app instance
app = create_app()


if __name__ == "__main__":
    serve()
