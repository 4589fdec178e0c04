"""Object metadata collaborator.

Composes the DOS/DRS resolver, access token minting and the Cloud Storage
metadata client into the single fetch the summary pipeline needs.
"""

from __future__ import annotations

from filesummary.clients.data_objects import DataObjectClient
from filesummary.clients.gcs_metadata import GcsMetadataClient
from filesummary.clients.service_account_token import ServiceAccountTokenClient
from filesummary.services.summary.models import (
    Credential,
    ObjectMetadata,
    ObjectReference,
    ServiceAccountKey,
)


class ObjectMetadataClient:
    """Fetches ObjectMetadata for any classified reference."""

    def __init__(
        self,
        *,
        data_objects: DataObjectClient,
        gcs: GcsMetadataClient,
        tokens: ServiceAccountTokenClient,
    ) -> None:
        self._data_objects = data_objects
        self._gcs = gcs
        self._tokens = tokens

    def get_metadata(
        self,
        reference: ObjectReference,
        credential: Credential,
        key: ServiceAccountKey | None,
    ) -> ObjectMetadata:
        """Fetch metadata for a reference.

        dos:// and drs:// references are first resolved to their gs://
        location. Storage is read as the service account when a key was
        obtained, otherwise as the caller.

        Raises:
            MetadataFetchError: If resolution, token minting or the metadata
                read fails.
        """
        location = reference if reference.is_direct else self._data_objects.resolve(reference)
        access_token = self._tokens.get_access_token(key) if key is not None else credential.token
        return self._gcs.get_metadata(location, access_token)
