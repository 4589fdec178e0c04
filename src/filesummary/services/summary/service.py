"""File summary orchestrator.

The single entry point for summarizing a data object, used by the API route
and the CLI. Runs the pipeline strictly in order, each stage consuming the
previous stage's value and short-circuiting by raising:

1. Validate request     -> MissingUriError (400)
2. Classify URI         -> MalformedUriError / UnsupportedSchemeError (400)
3. Require credential   -> UnauthorizedError (401)
4. Exchange credential  -> KeyExchangeError (502); NOT_LINKED continues
5. Fetch metadata       -> MetadataFetchError (502)
6. Sign URL (key only)  -> UrlSigningError (502)
7. Respond              -> FileSummary (200)

No stage is retried and no state outlives the request.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from filesummary.config import ServiceConfig
from filesummary.services.summary.classifier import classify_uri
from filesummary.services.summary.errors import (
    FileSummaryError,
    MetadataFetchError,
    UrlSigningError,
)
from filesummary.services.summary.models import (
    Credential,
    FileSummary,
    KeyProvider,
    MetadataProvider,
    ObjectMetadata,
    ObjectReference,
    ServiceAccountKey,
    SignedUrlProvider,
)
from filesummary.services.summary.resolver import CredentialResolver, require_credential
from filesummary.services.summary.validator import validate_request

logger = logging.getLogger(__name__)


class FileSummaryService:
    """Resolves data object URIs into metadata and optional signed URLs."""

    def __init__(
        self,
        *,
        key_provider: KeyProvider,
        metadata_provider: MetadataProvider,
        url_signer: SignedUrlProvider,
    ) -> None:
        """Initialize the service.

        Args:
            key_provider: Credential exchange collaborator.
            metadata_provider: Object metadata collaborator.
            url_signer: URL signing collaborator.
        """
        self._resolver = CredentialResolver(key_provider)
        self._metadata_provider = metadata_provider
        self._url_signer = url_signer

    def summarize(
        self,
        body: Any,
        authorization: str | None,
        *,
        request_id: str | None = None,
    ) -> FileSummary:
        """Run the summary pipeline for one request.

        Args:
            body: Decoded JSON body (None if empty or not JSON).
            authorization: Authorization header value, if any.
            request_id: Correlation ID (generated if not provided).

        Returns:
            FileSummary with metadata, and signed_url when a key was obtained.

        Raises:
            FileSummaryError: Subclass matching the failing stage.
        """
        if request_id is None:
            request_id = str(uuid.uuid4())

        validated = validate_request(body, authorization)
        reference = classify_uri(validated.uri)
        credential = require_credential(validated.credential)

        exchange = self._resolver.resolve(reference, credential, request_id=request_id)

        metadata = self._fetch_metadata(reference, credential, exchange.key, request_id)

        signed_url = None
        if exchange.key is not None:
            signed_url = self._sign(metadata, exchange.key, request_id)

        return FileSummary.from_metadata(metadata, signed_url)

    def _fetch_metadata(
        self,
        reference: ObjectReference,
        credential: Credential,
        key: ServiceAccountKey | None,
        request_id: str,
    ) -> ObjectMetadata:
        try:
            return self._metadata_provider.get_metadata(reference, credential, key)
        except FileSummaryError as exc:
            logger.warning(
                "Metadata fetch failed for %s: %s",
                reference.raw,
                exc,
                extra={"request_id": request_id},
            )
            raise
        except Exception as exc:
            logger.warning(
                "Metadata fetch failed for %s: %s",
                reference.raw,
                exc,
                extra={"request_id": request_id},
            )
            raise MetadataFetchError(f"Object metadata fetch failed: {exc}") from exc

    def _sign(self, metadata: ObjectMetadata, key: ServiceAccountKey, request_id: str) -> str:
        try:
            return self._url_signer.sign(metadata.gs_uri, key)
        except FileSummaryError:
            logger.warning(
                "URL signing failed for %s",
                metadata.gs_uri,
                extra={"request_id": request_id},
            )
            raise
        except Exception as exc:
            logger.warning(
                "URL signing failed for %s",
                metadata.gs_uri,
                extra={"request_id": request_id},
            )
            raise UrlSigningError(f"URL signing failed: {exc}") from exc


def create_default_file_summary_service(config: ServiceConfig | None = None) -> FileSummaryService:
    """Wire the service to the real upstream clients.

    Args:
        config: Service configuration; read from the environment if None.

    Returns:
        FileSummaryService backed by Sam, Bond, DOS/DRS servers and Cloud Storage.
    """
    from filesummary.clients import (
        DataObjectClient,
        GcsMetadataClient,
        ObjectMetadataClient,
        ServiceAccountKeyClient,
        ServiceAccountTokenClient,
        UrlSigner,
    )

    if config is None:
        config = ServiceConfig.from_env()

    metadata_provider = ObjectMetadataClient(
        data_objects=DataObjectClient(config),
        gcs=GcsMetadataClient(config),
        tokens=ServiceAccountTokenClient(timeout_seconds=config.http_timeout_seconds),
    )

    return FileSummaryService(
        key_provider=ServiceAccountKeyClient(config),
        metadata_provider=metadata_provider,
        url_signer=UrlSigner(ttl_seconds=config.signed_url_ttl_seconds),
    )
