"""Fake collaborators and canned metadata for file summary tests."""

from tests.fixtures.summary.fakes import (
    FAKE_CLIENT_EMAIL,
    FAKE_SIGNED_URL,
    FakeKeyProvider,
    FakeMetadataProvider,
    FakeUrlSigner,
    gs_object_metadata,
    gs_object_metadata_payload,
    make_service_account_key,
)

__all__ = [
    "FAKE_CLIENT_EMAIL",
    "FAKE_SIGNED_URL",
    "FakeKeyProvider",
    "FakeMetadataProvider",
    "FakeUrlSigner",
    "gs_object_metadata",
    "gs_object_metadata_payload",
    "make_service_account_key",
]
