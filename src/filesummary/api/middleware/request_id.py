"""Request ID middleware for the file summary API.

Every request gets an ID, taken from X-Request-Id when the caller sends one.
The ID is echoed on the response, stored on request.state for error
envelopes, and bound to a context variable so log records emitted while the
request is handled carry it as `request_id`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_ID_HEADER = "X-Request-Id"

current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


class RequestIdLogFilter(logging.Filter):
    """Stamps log records with the request ID of the request being handled.

    Records that already carry request_id (passed via `extra`) keep it.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = current_request_id.get()
        return True


def resolve_request_id(incoming: str | None) -> str:
    """Use a non-blank incoming ID, else generate a uuid4."""
    if incoming and incoming.strip():
        return incoming.strip()
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attaches a request ID to the request, its log records and its response."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        token = current_request_id.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            current_request_id.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
