"""File summary route.

POST /fileSummaryV1 with body {"uri": "<gs|dos|drs URI>"} and an
Authorization: Bearer header. Responds with object metadata and, when the
caller's credential could be exchanged for a service account key, a signed
URL.

The body is decoded by hand rather than through a pydantic model: a missing,
empty or non-JSON body must produce the same 400 as a missing `uri`, not a
422.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from filesummary.api.errors import ErrorResponse
from filesummary.services.summary.models import FileSummary
from filesummary.services.summary.service import FileSummaryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["File Summary"])


def _get_summary_service(request: Request) -> FileSummaryService:
    """Get the summary service from app state.

    Creates the default, upstream-backed instance on first use when none
    was injected. Concurrent first requests may each build one; the last
    assignment wins, which is harmless because the service holds no
    per-request state.

    Raises:
        HTTPException: 500 if the service cannot be configured.
    """
    from filesummary.config import ConfigError
    from filesummary.services.summary.service import create_default_file_summary_service

    svc: FileSummaryService | None = getattr(request.app.state, "summary_service", None)
    if svc is not None:
        return svc

    try:
        svc = create_default_file_summary_service(getattr(request.app.state, "config", None))
    except ConfigError as exc:
        logger.error("Failed to create file summary service: %s", exc)
        raise HTTPException(status_code=500, detail="File summary service unavailable") from exc

    request.app.state.summary_service = svc
    return svc


def decode_body(raw: bytes) -> Any:
    """Decode a JSON request body; empty or undecodable bodies become None."""
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


@router.post(
    "/fileSummaryV1",
    response_model=FileSummary,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid URI"},
        401: {"model": ErrorResponse, "description": "Missing bearer token"},
        502: {"model": ErrorResponse, "description": "Upstream failure"},
    },
)
async def file_summary_v1(request: Request) -> JSONResponse:
    """Summarize a gs://, dos:// or drs:// object.

    Returns:
        200 with metadata (contentType, size, updated, md5Hash, bucket, name,
        gsUri) and signedUrl when one could be produced.
    """
    svc = _get_summary_service(request)
    body = decode_body(await request.body())
    authorization = request.headers.get("Authorization")
    request_id = getattr(request.state, "request_id", None)

    summary = await run_in_threadpool(
        svc.summarize,
        body,
        authorization,
        request_id=request_id,
    )

    return JSONResponse(status_code=200, content=summary.to_response())
