"""Access token minting for service account keys.

Implements the OAuth 2.0 JWT bearer grant: an RS256 assertion signed with the
key's private key is posted to the key's token_uri in exchange for a
short-lived access token scoped to read-only Cloud Storage.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime

import httpx

from filesummary.clients.http import decode_json, open_client
from filesummary.clients.signing import (
    KeyMaterialError,
    b64url_encode,
    load_private_key,
    sign_rs256,
)
from filesummary.services.summary.errors import AccessTokenError
from filesummary.services.summary.models import ServiceAccountKey

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
STORAGE_READ_ONLY_SCOPE = "https://www.googleapis.com/auth/devstorage.read_only"
ASSERTION_LIFETIME_SECONDS = 3600


def build_assertion(
    key: ServiceAccountKey,
    *,
    issued_at: datetime,
    scope: str = STORAGE_READ_ONLY_SCOPE,
) -> str:
    """Build the signed JWT assertion for the token request.

    Raises:
        KeyMaterialError: If the key has no usable RSA private key.
    """
    private_key = load_private_key(key)

    header: dict[str, str] = {"alg": "RS256", "typ": "JWT"}
    if key.private_key_id:
        header["kid"] = key.private_key_id

    iat = int(issued_at.timestamp())
    claims = {
        "iss": key.client_email,
        "scope": scope,
        "aud": key.token_uri,
        "iat": iat,
        "exp": iat + ASSERTION_LIFETIME_SECONDS,
    }

    segments = [
        b64url_encode(json.dumps(header, separators=(",", ":"), sort_keys=True).encode("utf-8")),
        b64url_encode(json.dumps(claims, separators=(",", ":"), sort_keys=True).encode("utf-8")),
    ]
    signing_input = ".".join(segments).encode("ascii")
    signature = sign_rs256(private_key, signing_input)

    return ".".join([*segments, b64url_encode(signature)])


class ServiceAccountTokenClient:
    """Mints access tokens from service account keys."""

    def __init__(
        self,
        *,
        timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._http_client = http_client
        self._clock = clock or (lambda: datetime.now(UTC))

    def get_access_token(self, key: ServiceAccountKey) -> str:
        """Exchange a service account key for an access token.

        Raises:
            AccessTokenError: If the key is unusable or the token endpoint fails.
        """
        try:
            assertion = build_assertion(key, issued_at=self._clock())
        except KeyMaterialError as exc:
            raise AccessTokenError(str(exc)) from exc

        url = key.token_uri
        form = {"grant_type": JWT_BEARER_GRANT_TYPE, "assertion": assertion}

        with open_client(self._http_client, self._timeout_seconds) as client:
            try:
                response = client.post(url, data=form, headers={"Accept": "application/json"})
            except httpx.RequestError as exc:
                raise AccessTokenError(f"Token request failed: {exc}", url=url) from exc

        if response.is_error:
            raise AccessTokenError(
                f"Token request returned HTTP {response.status_code}",
                upstream_status=response.status_code,
                url=url,
            )

        try:
            body = decode_json(response)
        except ValueError as exc:
            raise AccessTokenError(
                "Token response is not JSON",
                upstream_status=response.status_code,
                url=url,
            ) from exc

        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token:
            raise AccessTokenError(
                "Token response has no access_token",
                upstream_status=response.status_code,
                url=url,
            )

        logger.debug("Minted access token for %s", key.client_email)
        return token
