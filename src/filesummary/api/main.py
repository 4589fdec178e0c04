"""File summary FastAPI application factory.

This module provides the create_app() factory for bootstrapping the API.
"""

from fastapi import FastAPI
from starlette.exceptions import HTTPException

from filesummary.api.errors import (
    file_summary_error_handler,
    generic_exception_handler,
    http_exception_handler,
)
from filesummary.api.middleware.request_id import RequestIdMiddleware
from filesummary.api.routes.file_summary import router as file_summary_router
from filesummary.api.routes.health import SERVICE_VERSION
from filesummary.api.routes.health import router as health_router
from filesummary.config import ServiceConfig
from filesummary.services.summary.errors import FileSummaryError
from filesummary.services.summary.service import FileSummaryService


def create_app(
    summary_service: FileSummaryService | None = None,
    config: ServiceConfig | None = None,
) -> FastAPI:
    """Create and configure the file summary FastAPI application.

    This factory:
    - Creates a FastAPI app with service metadata
    - Registers RequestIdMiddleware
    - Registers the FileSummaryError exception handler and the fallbacks
    - Mounts the health and file summary routers (no app-level auth; the
      file summary pipeline checks the bearer token itself)

    Args:
        summary_service: Optional FileSummaryService for testing. If None, a
            service backed by the real upstreams is created on first request.
        config: Optional ServiceConfig used when creating the default service.
            If None, read from the environment at that point.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="File Summary API",
        description="Resolves gs://, dos:// and drs:// URIs to object metadata and signed URLs",
        version=SERVICE_VERSION,
    )

    app.state.summary_service = summary_service
    app.state.config = config

    app.add_middleware(RequestIdMiddleware)

    app.add_exception_handler(FileSummaryError, file_summary_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health_router)
    app.include_router(file_summary_router)

    return app
