"""URI classifier.

Parses a caller-supplied URI into an ObjectReference and decides its
resolution path:

- gs://<bucket>/<object>     -> DIRECT_STORE
- dos://<authority>/<id>     -> INDIRECT_REFERENCE
- drs://<authority>/<id>     -> INDIRECT_REFERENCE

The URI is split on "://" and the first "/" rather than with a generic URL
parser, so object names containing "?" or "#" survive intact.
"""

from __future__ import annotations

import re

from filesummary.services.summary.errors import MalformedUriError, UnsupportedSchemeError
from filesummary.services.summary.models import SCHEME_KINDS, ObjectReference, UriScheme

SCHEME_SEPARATOR = "://"

_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*$")
_BUCKET_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._-]{1,220}[a-z0-9]$")
_AUTHORITY_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9.-]*[a-z0-9])?(:[0-9]{1,5})?$")


def classify_uri(raw: str) -> ObjectReference:
    """Classify a URI into an ObjectReference.

    Args:
        raw: URI string from the request body.

    Returns:
        ObjectReference with normalized scheme, authority and identifier.

    Raises:
        MalformedUriError: If the URI does not split into scheme, authority and path.
        UnsupportedSchemeError: If the scheme is not gs, dos or drs.
    """
    uri = raw.strip()
    if not uri:
        raise MalformedUriError("uri is empty")

    scheme_part, separator, remainder = uri.partition(SCHEME_SEPARATOR)
    if not separator:
        raise MalformedUriError("uri has no scheme")

    scheme_name = scheme_part.lower()
    if not _SCHEME_PATTERN.match(scheme_name):
        raise MalformedUriError("uri scheme is not valid")

    try:
        scheme = UriScheme(scheme_name)
    except ValueError:
        raise UnsupportedSchemeError(scheme_name) from None

    authority, _, identifier = remainder.partition("/")
    authority = authority.lower()

    if not authority:
        raise MalformedUriError("uri has no authority")
    if not identifier:
        raise MalformedUriError("uri has no object identifier")

    pattern = _BUCKET_PATTERN if scheme == UriScheme.GS else _AUTHORITY_PATTERN
    if not pattern.match(authority):
        raise MalformedUriError(f"invalid {scheme.value} authority")

    return ObjectReference(
        raw=raw,
        scheme=scheme,
        kind=SCHEME_KINDS[scheme],
        authority=authority,
        identifier=identifier,
    )
