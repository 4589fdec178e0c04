"""Tests for the shared error envelope.

Every non-2xx response carries code, message, details and request_id, and the
X-Request-Id header matches request_id.
"""

from __future__ import annotations

import logging

import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException

from filesummary.api.error_model import get_error_code_for_status
from filesummary.api.main import create_app
from filesummary.api.middleware.request_id import (
    RequestIdLogFilter,
    current_request_id,
    resolve_request_id,
)
from filesummary.services.summary.errors import FileSummaryError

ENVELOPE_KEYS = {"code", "message", "details", "request_id"}


@pytest.fixture
def client() -> TestClient:
    app = create_app()

    router = APIRouter()

    @router.get("/boom")
    def boom() -> None:
        raise RuntimeError("secret internals")

    app.include_router(router)
    return TestClient(app, raise_server_exceptions=False)


def test_unknown_route_is_404_envelope(client: TestClient) -> None:
    response = client.get("/nope", headers={"X-Request-Id": "req-404"})

    assert response.status_code == 404
    data = response.json()
    assert set(data) == ENVELOPE_KEYS
    assert data["code"] == "NOT_FOUND"
    assert "status" not in data
    assert data["request_id"] == "req-404"
    assert response.headers["X-Request-Id"] == "req-404"


def test_wrong_method_is_405_envelope(client: TestClient) -> None:
    response = client.get("/fileSummaryV1")

    assert response.status_code == 405
    assert response.json()["code"] == "METHOD_NOT_ALLOWED"


def test_unhandled_exception_is_500_without_internals(client: TestClient) -> None:
    response = client.get("/boom", headers={"X-Request-Id": "req-500"})

    assert response.status_code == 500
    data = response.json()
    assert set(data) == ENVELOPE_KEYS
    assert data["code"] == "INTERNAL_ERROR"
    assert "secret internals" not in response.text
    assert data["request_id"] == "req-500"


@pytest.mark.parametrize(
    ("status", "code"),
    [(400, "BAD_REQUEST"), (401, "UNAUTHORIZED"), (502, "BAD_GATEWAY"), (422, "ERROR")],
)
def test_error_code_for_status(status: int, code: str) -> None:
    assert get_error_code_for_status(status) == code


def test_app_registers_only_envelope_handlers() -> None:
    handlers = create_app().exception_handlers
    ours = {
        exc for exc, handler in handlers.items() if handler.__module__ == "filesummary.api.errors"
    }
    assert ours == {FileSummaryError, HTTPException, Exception}


class TestRequestIdLogging:
    def test_resolve_request_id(self) -> None:
        assert resolve_request_id("  abc  ") == "abc"
        assert len(resolve_request_id(None)) == 36
        assert len(resolve_request_id("   ")) == 36

    def test_filter_stamps_current_request_id(self) -> None:
        record = logging.LogRecord("filesummary.test", logging.INFO, __file__, 1, "m", (), None)
        token = current_request_id.set("req-ctx")
        try:
            assert RequestIdLogFilter().filter(record) is True
        finally:
            current_request_id.reset(token)

        assert record.request_id == "req-ctx"  # type: ignore[attr-defined]

    def test_filter_keeps_explicit_request_id(self) -> None:
        record = logging.LogRecord("filesummary.test", logging.INFO, __file__, 1, "m", (), None)
        record.request_id = "req-explicit"
        token = current_request_id.set("req-ctx")
        try:
            RequestIdLogFilter().filter(record)
        finally:
            current_request_id.reset(token)

        assert record.request_id == "req-explicit"

    def test_filter_outside_request_sets_none(self) -> None:
        record = logging.LogRecord("filesummary.test", logging.INFO, __file__, 1, "m", (), None)
        RequestIdLogFilter().filter(record)
        assert record.request_id is None  # type: ignore[attr-defined]
