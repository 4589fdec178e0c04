"""Request validator.

Extracts the target URI and the caller's credential from a raw request.
A missing credential is not an error here: whether one is needed is decided
after the URI has been classified.
"""

from __future__ import annotations

from typing import Any

from filesummary.services.summary.errors import MissingUriError
from filesummary.services.summary.models import Credential, ValidatedRequest

URI_FIELD = "uri"


def extract_uri(body: Any) -> str:
    """Return the `uri` field of a decoded JSON body.

    Raises:
        MissingUriError: If the body is not an object or has no non-empty
            string `uri` field.
    """
    if not isinstance(body, dict):
        raise MissingUriError("request body is not a JSON object")

    uri = body.get(URI_FIELD)
    if not isinstance(uri, str) or not uri.strip():
        raise MissingUriError()

    return uri


def extract_credential(authorization: str | None) -> Credential | None:
    """Wrap the Authorization header, treating blank values as absent."""
    if authorization is None or not authorization.strip():
        return None
    return Credential(authorization=authorization.strip())


def validate_request(body: Any, authorization: str | None) -> ValidatedRequest:
    """Validate a raw request.

    Args:
        body: Decoded JSON body, or None if the body was empty or not JSON.
        authorization: Authorization header value, if present.

    Returns:
        ValidatedRequest with the raw URI and the optional credential.

    Raises:
        MissingUriError: If no URI was supplied.
    """
    return ValidatedRequest(
        uri=extract_uri(body),
        credential=extract_credential(authorization),
    )
