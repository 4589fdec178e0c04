"""DOS/DRS data object resolver.

Resolves a dos:// or drs:// reference to the gs:// location of its bytes:

- dos://host/id -> GET https://host/ga4gh/dos/v1/dataobjects/id
  storage URLs in data_object.urls[].url
- drs://host/id -> GET https://host/ga4gh/drs/v1/objects/id
  storage URLs in access_methods[].access_url.url

Compact identifier authorities (dg.4503 and friends) have no server of their
own; they resolve through the configured compact identifier host with the
prefix kept in the path.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from typing import Any

import httpx

from filesummary.clients.http import build_headers, decode_json, open_client
from filesummary.config import ServiceConfig
from filesummary.services.summary.classifier import classify_uri
from filesummary.services.summary.errors import DataObjectResolutionError, InvalidUriError
from filesummary.services.summary.models import ObjectReference, UriScheme

logger = logging.getLogger(__name__)

DOS_OBJECTS_PATH = "/ga4gh/dos/v1/dataobjects"
DRS_OBJECTS_PATH = "/ga4gh/drs/v1/objects"
GS_URL_PREFIX = "gs://"

_COMPACT_ID_PATTERN = re.compile(r"^dg\.[0-9a-z]+$")


def is_compact_identifier(authority: str) -> bool:
    return bool(_COMPACT_ID_PATTERN.match(authority))


def data_object_url(reference: ObjectReference, compact_id_host: str) -> str:
    """Map a dos:// or drs:// reference to its resolver HTTPS URL.

    Raises:
        ValueError: If the reference is not a dos:// or drs:// reference.
    """
    if reference.scheme == UriScheme.DOS:
        objects_path = DOS_OBJECTS_PATH
    elif reference.scheme == UriScheme.DRS:
        objects_path = DRS_OBJECTS_PATH
    else:
        raise ValueError(f"Not a data object reference: {reference.scheme}")

    host = reference.authority
    identifier = reference.identifier
    if is_compact_identifier(host):
        identifier = f"{host}/{identifier}"
        host = compact_id_host

    encoded_identifier = urllib.parse.quote(identifier, safe="/:")
    return f"https://{host}{objects_path}/{encoded_identifier}"


def find_gs_url(body: Any) -> str | None:
    """Return the first gs:// URL in a DOS or DRS object document."""
    if not isinstance(body, dict):
        return None

    candidates: list[Any] = []

    data_object = body.get("data_object")
    if isinstance(data_object, dict):
        for entry in data_object.get("urls") or []:
            if isinstance(entry, dict):
                candidates.append(entry.get("url"))

    for method in body.get("access_methods") or []:
        if isinstance(method, dict):
            access_url = method.get("access_url")
            if isinstance(access_url, dict):
                candidates.append(access_url.get("url"))

    for candidate in candidates:
        if isinstance(candidate, str) and candidate.startswith(GS_URL_PREFIX):
            return candidate
    return None


class DataObjectClient:
    """Resolves data object references through their DOS/DRS server."""

    def __init__(self, config: ServiceConfig, http_client: httpx.Client | None = None) -> None:
        self._config = config
        self._http_client = http_client

    def resolve(self, reference: ObjectReference) -> ObjectReference:
        """Resolve a data object to a direct-store reference.

        Args:
            reference: dos:// or drs:// reference.

        Returns:
            The gs:// location of the object's bytes as an ObjectReference.

        Raises:
            DataObjectResolutionError: If the server fails, or the object has
                no usable gs:// URL.
        """
        url = data_object_url(reference, self._config.compact_id_host)

        with open_client(self._http_client, self._config.http_timeout_seconds) as client:
            try:
                response = client.get(url, headers=build_headers())
            except httpx.RequestError as exc:
                raise DataObjectResolutionError(
                    f"Data object request failed: {exc}", url=url
                ) from exc

        if response.is_error:
            raise DataObjectResolutionError(
                f"Data object request returned HTTP {response.status_code}",
                upstream_status=response.status_code,
                url=url,
            )

        try:
            body = decode_json(response)
        except ValueError as exc:
            raise DataObjectResolutionError(
                "Data object response is not JSON",
                upstream_status=response.status_code,
                url=url,
            ) from exc

        gs_url = find_gs_url(body)
        if gs_url is None:
            raise DataObjectResolutionError(
                f"Data object {reference.raw} has no gs:// URL",
                upstream_status=response.status_code,
                url=url,
            )

        try:
            location = classify_uri(gs_url)
        except InvalidUriError as exc:
            raise DataObjectResolutionError(
                f"Data object {reference.raw} has an invalid gs:// URL",
                upstream_status=response.status_code,
                url=url,
            ) from exc

        logger.info("Resolved %s to %s", reference.raw, location.gs_uri)
        return location
