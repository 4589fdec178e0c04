"""Service account key provider client.

Exchanges the caller's bearer credential for a Google service account key:

- gs:// references: the caller's pet service account key from Sam
  GET {sam}/api/google/v1/user/petServiceAccount/key
- dos:// and drs:// references: the service account key Bond holds for the
  caller's linked Fence account
  GET {bond}/api/link/v1/{provider}/serviceaccount/key

A 404 or an empty body means the caller has no linked account; that is
returned as NOT_LINKED. Every other failure raises KeyExchangeError.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

import httpx
from pydantic import ValidationError

from filesummary.clients.http import build_headers, decode_json, open_client
from filesummary.config import ServiceConfig
from filesummary.services.summary.errors import KeyExchangeError
from filesummary.services.summary.models import (
    Credential,
    KeyExchangeResult,
    ObjectReference,
    ServiceAccountKey,
)

logger = logging.getLogger(__name__)

SAM_PET_KEY_PATH = "/api/google/v1/user/petServiceAccount/key"
BOND_KEY_PATH_TEMPLATE = "/api/link/v1/{provider}/serviceaccount/key"


class BondProvider(StrEnum):
    """Fence deployments Bond can hold a linked account for."""

    FENCE = "fence"
    DCF_FENCE = "dcf-fence"


FENCE_AUTHORITIES = frozenset({"dg.4503"})


def determine_bond_provider(reference: ObjectReference) -> BondProvider:
    """Pick the Bond provider that issues keys for a data object's authority."""
    if reference.authority in FENCE_AUTHORITIES:
        return BondProvider.FENCE
    return BondProvider.DCF_FENCE


class ServiceAccountKeyClient:
    """Credential exchange against Sam (gs://) and Bond (dos://, drs://)."""

    def __init__(self, config: ServiceConfig, http_client: httpx.Client | None = None) -> None:
        """Initialize the client.

        Args:
            config: Service configuration with Sam and Bond base URLs.
            http_client: Optional httpx.Client for dependency injection (testing).
        """
        self._config = config
        self._http_client = http_client

    def key_url_for(self, reference: ObjectReference) -> str:
        """Return the key endpoint that serves this reference."""
        if reference.is_direct:
            return f"{self._config.sam_base_url}{SAM_PET_KEY_PATH}"

        provider = determine_bond_provider(reference)
        path = BOND_KEY_PATH_TEMPLATE.format(provider=provider.value)
        return f"{self._config.bond_base_url}{path}"

    def get_key(self, reference: ObjectReference, credential: Credential) -> KeyExchangeResult:
        """Exchange the caller's credential for a service account key.

        Args:
            reference: Classified reference; selects Sam or Bond.
            credential: Caller's credential, forwarded verbatim.

        Returns:
            OBTAINED with the key, or NOT_LINKED.

        Raises:
            KeyExchangeError: On network errors, non-404 error statuses, or an
                unreadable key document.
        """
        url = self.key_url_for(reference)

        with open_client(self._http_client, self._config.http_timeout_seconds) as client:
            try:
                response = client.get(url, headers=build_headers(credential.authorization))
            except httpx.RequestError as exc:
                raise KeyExchangeError(
                    f"Service account key request failed: {exc}", url=url
                ) from exc

        if response.status_code == 404:
            logger.info("No linked service account at %s", url)
            return KeyExchangeResult.not_linked()

        if response.is_error:
            raise KeyExchangeError(
                f"Service account key request returned HTTP {response.status_code}",
                upstream_status=response.status_code,
                url=url,
            )

        try:
            body = decode_json(response)
        except ValueError as exc:
            raise KeyExchangeError(
                "Service account key response is not JSON",
                upstream_status=response.status_code,
                url=url,
            ) from exc

        key_document = _unwrap_key_document(body)
        if not key_document:
            return KeyExchangeResult.not_linked()

        try:
            key = ServiceAccountKey.model_validate(key_document)
        except ValidationError as exc:
            raise KeyExchangeError(
                "Service account key response is missing key fields",
                upstream_status=response.status_code,
                url=url,
            ) from exc

        return KeyExchangeResult.obtained(key)


def _unwrap_key_document(body: Any) -> dict[str, Any] | None:
    """Bond wraps the key as {"data": {...}}; Sam returns the key itself."""
    if not isinstance(body, dict):
        return None
    if "data" in body:
        data = body["data"]
        return data if isinstance(data, dict) and data else None
    return body or None
