"""Cloud Storage object metadata client.

Reads object metadata from the JSON API:
GET {gcs}/storage/v1/b/{bucket}/o/{object}
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import httpx

from filesummary.clients.http import bearer, build_headers, decode_json, open_client
from filesummary.config import ServiceConfig
from filesummary.services.summary.errors import MetadataFetchError
from filesummary.services.summary.models import ObjectMetadata, ObjectReference

logger = logging.getLogger(__name__)


def object_metadata_url(gcs_base_url: str, bucket: str, name: str) -> str:
    encoded_bucket = urllib.parse.quote(bucket, safe="")
    encoded_name = urllib.parse.quote(name, safe="")
    return f"{gcs_base_url}/storage/v1/b/{encoded_bucket}/o/{encoded_name}"


def normalize_object_resource(data: dict[str, Any], location: ObjectReference) -> ObjectMetadata:
    """Map a JSON API object resource to ObjectMetadata.

    The JSON API reports size as a decimal string.
    """
    bucket = data.get("bucket") or location.authority
    name = data.get("name") or location.identifier

    size_raw = data.get("size")
    size = int(size_raw) if size_raw is not None else None

    return ObjectMetadata(
        content_type=data.get("contentType"),
        size=size,
        updated=data.get("updated"),
        md5_hash=data.get("md5Hash"),
        bucket=bucket,
        name=name,
        gs_uri=f"gs://{bucket}/{name}",
    )


class GcsMetadataClient:
    """Fetches object metadata from Cloud Storage."""

    def __init__(self, config: ServiceConfig, http_client: httpx.Client | None = None) -> None:
        self._config = config
        self._http_client = http_client

    def get_metadata(self, location: ObjectReference, access_token: str) -> ObjectMetadata:
        """Fetch metadata for a gs:// location.

        Args:
            location: Direct-store reference naming bucket and object.
            access_token: OAuth access token with storage read access.

        Returns:
            ObjectMetadata for the object.

        Raises:
            MetadataFetchError: On network errors, error statuses (including
                404), or a malformed object resource.
        """
        url = object_metadata_url(
            self._config.gcs_base_url, location.authority, location.identifier
        )

        with open_client(self._http_client, self._config.http_timeout_seconds) as client:
            try:
                response = client.get(url, headers=build_headers(bearer(access_token)))
            except httpx.RequestError as exc:
                raise MetadataFetchError(f"Object metadata request failed: {exc}", url=url) from exc

        if response.is_error:
            raise MetadataFetchError(
                f"Object metadata request for {location.gs_uri} "
                f"returned HTTP {response.status_code}",
                upstream_status=response.status_code,
                url=url,
            )

        try:
            data = decode_json(response)
            if not isinstance(data, dict):
                raise ValueError("object resource is not a JSON object")
            metadata = normalize_object_resource(data, location)
        except ValueError as exc:
            # pydantic.ValidationError is a ValueError
            raise MetadataFetchError(
                f"Malformed object metadata for {location.gs_uri}",
                upstream_status=response.status_code,
                url=url,
            ) from exc

        logger.debug("Fetched metadata for %s", location.gs_uri)
        return metadata
