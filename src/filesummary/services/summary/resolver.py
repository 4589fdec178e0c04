"""Credential resolver.

Requires a caller credential and exchanges it for a scoped service account
key. The exchange has three outcomes:

1. OBTAINED: a key was issued; the pipeline will sign a URL with it.
2. NOT_LINKED: the caller has no linked account; the pipeline continues and
   returns metadata without a signed URL.
3. KeyExchangeError raised: transport or unexpected failure; terminal (502).
"""

from __future__ import annotations

import logging

from filesummary.services.summary.errors import (
    FileSummaryError,
    KeyExchangeError,
    UnauthorizedError,
)
from filesummary.services.summary.models import (
    Credential,
    KeyExchangeResult,
    KeyExchangeStatus,
    KeyProvider,
    ObjectReference,
)

logger = logging.getLogger(__name__)


def require_credential(credential: Credential | None) -> Credential:
    """Reject requests without a bearer credential, whatever their scheme.

    Raises:
        UnauthorizedError: If no credential was presented.
    """
    if credential is None:
        raise UnauthorizedError()
    return credential


class CredentialResolver:
    """Runs the single credential exchange for a request."""

    def __init__(self, key_provider: KeyProvider) -> None:
        self._key_provider = key_provider

    def resolve(
        self,
        reference: ObjectReference,
        credential: Credential,
        *,
        request_id: str | None = None,
    ) -> KeyExchangeResult:
        """Exchange the caller's credential for a scoped key.

        Args:
            reference: Classified reference; the provider picks its key
                authority from it.
            credential: Caller's credential.
            request_id: Correlation ID for logging.

        Returns:
            KeyExchangeResult, OBTAINED or NOT_LINKED.

        Raises:
            KeyExchangeError: If the provider fails for any reason other than
                reporting the caller as not linked.
        """
        try:
            result = self._key_provider.get_key(reference, credential)
        except FileSummaryError:
            raise
        except Exception as exc:
            raise KeyExchangeError(f"Service account key exchange failed: {exc}") from exc

        if result is None or result.key is None:
            logger.warning(
                "No service account key for %s; skipping URL signing",
                reference.raw,
                extra={"request_id": request_id},
            )
            return KeyExchangeResult.not_linked()

        if result.status != KeyExchangeStatus.OBTAINED:
            return KeyExchangeResult.not_linked()

        logger.info(
            "Obtained service account key for %s",
            reference.raw,
            extra={"request_id": request_id},
        )
        return result
