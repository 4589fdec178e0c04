"""Shared httpx plumbing for upstream clients.

Every client accepts an optional injected httpx.Client (tests pass one backed
by httpx.MockTransport). Without one, a client is opened for the call and
closed afterwards. Upstream calls are made exactly once; there is no retry.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx

USER_AGENT = "filesummary/1.0"


@contextmanager
def open_client(http_client: httpx.Client | None, timeout_seconds: float) -> Iterator[httpx.Client]:
    """Yield the injected client, or a short-lived one closed on exit."""
    if http_client is not None:
        yield http_client
        return

    client = httpx.Client(timeout=timeout_seconds)
    try:
        yield client
    finally:
        client.close()


def build_headers(authorization: str | None = None) -> dict[str, str]:
    """Build request headers, adding Authorization only when one is given."""
    headers = {
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }
    if authorization:
        headers["Authorization"] = authorization
    return headers


def bearer(token: str) -> str:
    return f"Bearer {token}"


def decode_json(response: httpx.Response) -> Any:
    """Decode a JSON body; an empty body decodes to None.

    Raises:
        ValueError: If the body is not valid JSON.
    """
    if not response.content.strip():
        return None
    return response.json()
