"""Upstream clients for the file summary service.

Each client wraps one external system and raises the matching UpstreamError
subclass on failure.
"""

from filesummary.clients.data_objects import DataObjectClient
from filesummary.clients.gcs_metadata import GcsMetadataClient
from filesummary.clients.metadata import ObjectMetadataClient
from filesummary.clients.service_account_keys import ServiceAccountKeyClient
from filesummary.clients.service_account_token import ServiceAccountTokenClient
from filesummary.clients.url_signer import UrlSigner

__all__ = [
    "DataObjectClient",
    "GcsMetadataClient",
    "ObjectMetadataClient",
    "ServiceAccountKeyClient",
    "ServiceAccountTokenClient",
    "UrlSigner",
]
