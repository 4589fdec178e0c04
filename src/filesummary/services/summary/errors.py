"""File summary error types.

Every failure the summary pipeline can surface is a FileSummaryError. Each
subclass carries the caller-visible HTTP status, so the API layer maps errors
without knowing which pipeline stage raised them:

- InvalidUriError (400): MissingUriError, MalformedUriError, UnsupportedSchemeError
- UnauthorizedError (401)
- UpstreamError (502): KeyExchangeError, MetadataFetchError, UrlSigningError
"""

from __future__ import annotations

from typing import Any

MUST_SPECIFY_URI_MESSAGE = "Request must specify the URI of the file to summarize"
MUST_CONTAIN_BEARER_MESSAGE = "Request must contain a bearer token"


class FileSummaryError(Exception):
    """Base exception for the file summary pipeline.

    Attributes:
        status_code: Caller-visible HTTP status.
        code: Machine-readable error code for the error envelope.
        message: Human-readable message returned to the caller.
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_details(self) -> dict[str, Any] | None:
        """Return extra envelope details, or None when there are none."""
        return None


class InvalidUriError(FileSummaryError):
    """The request did not name a URI this service can resolve.

    All subclasses share one external message; callers match on it.
    """

    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, reason: str) -> None:
        super().__init__(MUST_SPECIFY_URI_MESSAGE)
        self.reason = reason


class MissingUriError(InvalidUriError):
    """No `uri` field in the request body."""

    def __init__(self, reason: str = "missing uri field") -> None:
        super().__init__(reason)


class MalformedUriError(InvalidUriError):
    """The `uri` field could not be parsed into scheme, authority and path."""


class UnsupportedSchemeError(InvalidUriError):
    """The `uri` parsed, but its scheme is not gs, dos or drs."""

    def __init__(self, scheme: str) -> None:
        super().__init__(f"unsupported scheme: {scheme!r}")
        self.scheme = scheme


class UnauthorizedError(FileSummaryError):
    """No bearer credential was presented."""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = MUST_CONTAIN_BEARER_MESSAGE) -> None:
        super().__init__(message)


class UpstreamError(FileSummaryError):
    """A collaborator call failed.

    The error is surfaced to the caller as the 502 payload.

    Attributes:
        upstream_status: HTTP status returned by the upstream, if it answered.
        url: URL of the failed upstream call, if any.
    """

    status_code = 502
    code = "BAD_GATEWAY"

    def __init__(
        self,
        message: str,
        *,
        upstream_status: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status
        self.url = url

    def to_details(self) -> dict[str, Any]:
        details: dict[str, Any] = {
            "error": type(self).__name__,
            "status": self.upstream_status,
            "url": self.url,
        }
        if self.__cause__ is not None:
            details["cause"] = type(self.__cause__).__name__
        return details


class KeyExchangeError(UpstreamError):
    """The service-account key provider failed for a reason other than 'not linked'."""


class MetadataFetchError(UpstreamError):
    """Object metadata could not be fetched."""


class DataObjectResolutionError(MetadataFetchError):
    """A dos:// or drs:// reference could not be resolved to a gs:// location."""


class AccessTokenError(MetadataFetchError):
    """An access token could not be minted from the service-account key."""


class UrlSigningError(UpstreamError):
    """A signed URL could not be produced from the service-account key."""
