"""File summary API error handling.

Maps every failure to the error envelope from error_model:

- FileSummaryError: pipeline errors; status and code come from the error
  class (400 invalid URI, 401 missing credential, 502 upstream failure).
  502 envelopes carry the upstream error in `details` and the upstream HTTP
  status at the top level.
- HTTPException: FastAPI/Starlette HTTP exceptions (404, 405, ...)
- Exception: catch-all for unhandled exceptions (500, no stack traces)
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from filesummary.api.error_model import get_error_code_for_status, make_error_response
from filesummary.services.summary.errors import FileSummaryError, InvalidUriError, UpstreamError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Error envelope schema, for OpenAPI documentation."""

    code: str
    message: str
    details: dict[str, Any] | None = None
    request_id: str | None = None
    status: int | None = None


async def file_summary_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for FileSummaryError."""
    assert isinstance(exc, FileSummaryError)

    request_id = getattr(request.state, "request_id", None)
    extra: dict[str, Any] | None = None

    if isinstance(exc, UpstreamError):
        extra = {"status": exc.upstream_status}
        logger.warning(
            "Upstream failure (%s): %s",
            type(exc).__name__,
            exc.message,
            extra={"request_id": request_id},
        )
    elif isinstance(exc, InvalidUriError):
        logger.info("Rejected request: %s", exc.reason, extra={"request_id": request_id})
    else:
        logger.info("Rejected request: %s", exc.message, extra={"request_id": request_id})

    return make_error_response(
        request,
        code=exc.code,
        message=exc.message,
        http_status=exc.status_code,
        details=exc.to_details(),
        extra=extra,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for Starlette HTTP exceptions (routing 404s included)."""
    assert isinstance(exc, HTTPException)

    code = get_error_code_for_status(exc.status_code)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"

    return make_error_response(
        request,
        code=code,
        message=message,
        http_status=exc.status_code,
        details=None,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler for unhandled exceptions.

    Returns 500 with a generic message and logs the exception.
    """
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception: %s",
        type(exc).__name__,
        extra={"request_id": request_id},
    )

    return make_error_response(
        request,
        code="INTERNAL_ERROR",
        message="An internal error occurred",
        http_status=500,
        details=None,
    )
