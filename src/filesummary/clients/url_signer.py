"""Cloud Storage V4 signed URLs.

Signs GET URLs locally with the service account key, following the
GOOG4-RSA-SHA256 scheme: a canonical request is hashed into a string to sign,
which is signed with the key's RSA private key.
"""

from __future__ import annotations

import hashlib
import logging
import urllib.parse
from collections.abc import Callable
from datetime import UTC, datetime

from filesummary.clients.signing import KeyMaterialError, load_private_key, sign_rs256
from filesummary.config import DEFAULT_SIGNED_URL_TTL_SECONDS, MAX_SIGNED_URL_TTL_SECONDS
from filesummary.services.summary.classifier import classify_uri
from filesummary.services.summary.errors import InvalidUriError, UrlSigningError
from filesummary.services.summary.models import ServiceAccountKey

logger = logging.getLogger(__name__)

SIGNING_ALGORITHM = "GOOG4-RSA-SHA256"
STORAGE_HOST = "storage.googleapis.com"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
SIGNED_HEADERS = "host"


def _quote(value: str, safe: str = "") -> str:
    return urllib.parse.quote(value, safe=safe)


def canonical_query_string(params: dict[str, str]) -> str:
    return "&".join(f"{_quote(k)}={_quote(v)}" for k, v in sorted(params.items()))


def build_string_to_sign(
    *,
    resource: str,
    query_string: str,
    request_timestamp: str,
    credential_scope: str,
) -> str:
    canonical_request = "\n".join(
        [
            "GET",
            resource,
            query_string,
            f"host:{STORAGE_HOST}\n",
            SIGNED_HEADERS,
            UNSIGNED_PAYLOAD,
        ]
    )
    return "\n".join(
        [
            SIGNING_ALGORITHM,
            request_timestamp,
            credential_scope,
            hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
        ]
    )


class UrlSigner:
    """Produces time-limited read URLs for gs:// objects."""

    def __init__(
        self,
        *,
        ttl_seconds: int = DEFAULT_SIGNED_URL_TTL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not 1 <= ttl_seconds <= MAX_SIGNED_URL_TTL_SECONDS:
            raise ValueError(f"ttl_seconds must be within 1..{MAX_SIGNED_URL_TTL_SECONDS}")
        self._ttl_seconds = ttl_seconds
        self._clock = clock or (lambda: datetime.now(UTC))

    def sign(self, gs_uri: str, key: ServiceAccountKey) -> str:
        """Create a V4 signed GET URL for a gs:// object.

        Args:
            gs_uri: Canonical gs://bucket/object URI.
            key: Service account key to sign with.

        Returns:
            HTTPS URL granting read access until the TTL elapses.

        Raises:
            UrlSigningError: If the URI is not a gs:// object or the key
                cannot sign.
        """
        try:
            location = classify_uri(gs_uri)
        except InvalidUriError as exc:
            raise UrlSigningError(f"Cannot sign {gs_uri!r}: {exc.reason}") from exc
        if not location.is_direct:
            raise UrlSigningError(f"Cannot sign {gs_uri!r}: not a gs:// URI")

        try:
            private_key = load_private_key(key)
        except KeyMaterialError as exc:
            raise UrlSigningError(str(exc)) from exc

        now = self._clock().astimezone(UTC)
        request_timestamp = now.strftime("%Y%m%dT%H%M%SZ")
        credential_scope = f"{now.strftime('%Y%m%d')}/auto/storage/goog4_request"

        resource = f"/{location.authority}/{_quote(location.identifier, safe='/~')}"
        params = {
            "X-Goog-Algorithm": SIGNING_ALGORITHM,
            "X-Goog-Credential": f"{key.client_email}/{credential_scope}",
            "X-Goog-Date": request_timestamp,
            "X-Goog-Expires": str(self._ttl_seconds),
            "X-Goog-SignedHeaders": SIGNED_HEADERS,
        }
        query_string = canonical_query_string(params)

        string_to_sign = build_string_to_sign(
            resource=resource,
            query_string=query_string,
            request_timestamp=request_timestamp,
            credential_scope=credential_scope,
        )
        signature = sign_rs256(private_key, string_to_sign.encode("utf-8")).hex()

        logger.debug("Signed %s for %s seconds", location.gs_uri, self._ttl_seconds)
        return f"https://{STORAGE_HOST}{resource}?{query_string}&X-Goog-Signature={signature}"
