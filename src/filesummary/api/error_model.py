"""Shared error response builder for the file summary API.

Every error response, from exception handlers and routes alike, uses the
same envelope:
- code: str - machine-readable error code (e.g., "BAD_REQUEST", "BAD_GATEWAY")
- message: str - human-readable error message
- details: dict | None - upstream error description for 502s, else None
- request_id: str - request correlation ID (always present)

502 responses also carry a top-level status: the upstream HTTP status, or
null when the upstream never answered.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from filesummary.api.middleware.request_id import REQUEST_ID_HEADER


def get_request_id(request: Request) -> str:
    """Extract or generate request_id for a request.

    Priority:
    1. request.state.request_id (set by RequestIdMiddleware)
    2. X-Request-Id header (if present)
    3. Generate new UUID (fallback)
    """
    request_id: str | None = getattr(request.state, "request_id", None)
    if request_id is not None:
        return str(request_id)

    header_id: str | None = request.headers.get(REQUEST_ID_HEADER)
    if header_id and header_id.strip():
        return header_id.strip()

    return str(uuid.uuid4())


def make_error_response(
    request: Request,
    *,
    code: str,
    message: str,
    http_status: int,
    details: dict[str, Any] | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build an error JSON response.

    Args:
        request: The FastAPI request object (for request_id extraction).
        code: Machine-readable error code.
        message: Human-readable error message.
        http_status: HTTP status code.
        details: Optional dict with additional context (no secrets).
        extra: Optional top-level fields merged into the envelope.

    Returns:
        JSONResponse with the error envelope and X-Request-Id header.
    """
    request_id = get_request_id(request)

    body: dict[str, Any] = {
        "code": code,
        "message": message,
        "details": details,
        "request_id": request_id,
    }
    if extra:
        body.update(extra)

    response = JSONResponse(status_code=http_status, content=body)
    response.headers[REQUEST_ID_HEADER] = request_id

    return response


HTTP_STATUS_TO_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    500: "INTERNAL_ERROR",
    502: "BAD_GATEWAY",
}


def get_error_code_for_status(status_code: int) -> str:
    return HTTP_STATUS_TO_CODE.get(status_code, "ERROR")
