"""File summary domain models.

Defines the types flowing through the summary pipeline:
- ObjectReference: a classified gs://, dos:// or drs:// URI
- Credential: the caller's bearer credential
- ServiceAccountKey: the scoped key obtained by credential exchange
- KeyExchangeResult: OBTAINED or NOT_LINKED outcome of the exchange
- ObjectMetadata / FileSummary: the response payload
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

BEARER_PREFIX = "bearer "


class UriScheme(StrEnum):
    """URI schemes the classifier recognizes."""

    GS = "gs"
    DOS = "dos"
    DRS = "drs"


class ReferenceKind(StrEnum):
    """How a reference resolves to storage.

    DIRECT_STORE: the URI already names a bucket and object.
    INDIRECT_REFERENCE: the URI names a data object that a DOS/DRS server
        resolves to a storage location.
    """

    DIRECT_STORE = "direct-store"
    INDIRECT_REFERENCE = "indirect-reference"


SCHEME_KINDS: dict[UriScheme, ReferenceKind] = {
    UriScheme.GS: ReferenceKind.DIRECT_STORE,
    UriScheme.DOS: ReferenceKind.INDIRECT_REFERENCE,
    UriScheme.DRS: ReferenceKind.INDIRECT_REFERENCE,
}


@dataclass(frozen=True)
class ObjectReference:
    """A parsed and classified object URI.

    Attributes:
        raw: The URI exactly as the caller sent it.
        scheme: Recognized scheme.
        kind: Resolution path implied by the scheme.
        authority: Lower-cased host (DOS/DRS server or compact id) or bucket.
        identifier: Object name or data object id, verbatim after the first slash.
    """

    raw: str
    scheme: UriScheme
    kind: ReferenceKind
    authority: str
    identifier: str

    @property
    def is_direct(self) -> bool:
        return self.kind == ReferenceKind.DIRECT_STORE

    @property
    def gs_uri(self) -> str:
        """Normalized gs:// URI. Only meaningful for direct-store references."""
        return f"gs://{self.authority}/{self.identifier}"


@dataclass(frozen=True)
class Credential:
    """The caller's bearer credential.

    Attributes:
        authorization: Authorization header value as presented; forwarded
            verbatim to upstreams that accept the caller's identity.
    """

    authorization: str

    @property
    def token(self) -> str:
        """The bare token, without the Bearer prefix."""
        value = self.authorization.strip()
        if value.lower().startswith(BEARER_PREFIX):
            return value[len(BEARER_PREFIX) :].strip()
        return value

    def __repr__(self) -> str:
        return "Credential(authorization='***')"


class ServiceAccountKey(BaseModel):
    """Google service account key JSON, as returned by Sam and Bond.

    Only the fields needed for token minting and URL signing are typed;
    the rest of the key document is preserved.
    """

    model_config = ConfigDict(extra="allow")

    client_email: str
    private_key: str
    private_key_id: str | None = None
    token_uri: str = "https://oauth2.googleapis.com/token"

    def __repr__(self) -> str:
        return f"ServiceAccountKey(client_email={self.client_email!r})"

    def __str__(self) -> str:
        return self.__repr__()


class KeyExchangeStatus(StrEnum):
    """Non-error outcomes of the credential exchange.

    Transport and unexpected failures are raised as KeyExchangeError, never
    returned, so this enum only covers the two outcomes that continue the
    pipeline.
    """

    OBTAINED = "OBTAINED"
    NOT_LINKED = "NOT_LINKED"


@dataclass(frozen=True)
class KeyExchangeResult:
    """Outcome of exchanging the caller's credential for a scoped key."""

    status: KeyExchangeStatus
    key: ServiceAccountKey | None = None

    @classmethod
    def obtained(cls, key: ServiceAccountKey) -> KeyExchangeResult:
        return cls(status=KeyExchangeStatus.OBTAINED, key=key)

    @classmethod
    def not_linked(cls) -> KeyExchangeResult:
        return cls(status=KeyExchangeStatus.NOT_LINKED)


class ObjectMetadata(BaseModel):
    """Canonical object metadata.

    Field aliases are the wire names callers read.
    """

    model_config = ConfigDict(populate_by_name=True)

    content_type: str | None = Field(default=None, alias="contentType")
    size: int | None = None
    updated: str | None = None
    md5_hash: str | None = Field(default=None, alias="md5Hash")
    bucket: str
    name: str
    gs_uri: str = Field(alias="gsUri")


class FileSummary(ObjectMetadata):
    """ObjectMetadata with the optional signed URL merged in."""

    signed_url: str | None = Field(default=None, alias="signedUrl")

    @classmethod
    def from_metadata(cls, metadata: ObjectMetadata, signed_url: str | None) -> FileSummary:
        return cls(**metadata.model_dump(), signed_url=signed_url)

    def to_response(self) -> dict[str, Any]:
        """Serialize for the caller; signedUrl is absent rather than null."""
        payload = self.model_dump(by_alias=True)
        if payload.get("signedUrl") is None:
            payload.pop("signedUrl", None)
        return payload


@dataclass(frozen=True)
class ValidatedRequest:
    """Output of the request validator."""

    uri: str
    credential: Credential | None


@runtime_checkable
class KeyProvider(Protocol):
    """Credential exchange collaborator."""

    def get_key(
        self, reference: ObjectReference, credential: Credential
    ) -> KeyExchangeResult | None:
        """Return OBTAINED or NOT_LINKED (None is read as NOT_LINKED); raise on failure."""
        ...


@runtime_checkable
class MetadataProvider(Protocol):
    """Object metadata collaborator."""

    def get_metadata(
        self,
        reference: ObjectReference,
        credential: Credential,
        key: ServiceAccountKey | None,
    ) -> ObjectMetadata:
        """Return canonical metadata for the reference; raise on failure."""
        ...


@runtime_checkable
class SignedUrlProvider(Protocol):
    """URL signing collaborator."""

    def sign(self, gs_uri: str, key: ServiceAccountKey) -> str:
        """Return a time-limited URL for the object; raise on failure."""
        ...
