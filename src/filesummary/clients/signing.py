"""RSA helpers for service account keys.

Both the access token assertion and the V4 signed URL are RSASSA-PKCS1-v1_5
SHA-256 signatures made with the key's PEM private key.
"""

from __future__ import annotations

import base64

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from filesummary.services.summary.models import ServiceAccountKey


class KeyMaterialError(Exception):
    """Raised when a service account key holds no usable RSA private key."""


def load_private_key(key: ServiceAccountKey) -> RSAPrivateKey:
    """Load the RSA private key from a service account key.

    Raises:
        KeyMaterialError: If the PEM is unreadable or not an RSA key.
    """
    try:
        private_key = serialization.load_pem_private_key(
            key.private_key.encode("utf-8"),
            password=None,
        )
    except (ValueError, TypeError) as exc:
        raise KeyMaterialError(f"Unreadable private key for {key.client_email}") from exc

    if not isinstance(private_key, RSAPrivateKey):
        raise KeyMaterialError(f"Private key for {key.client_email} is not an RSA key")

    return private_key


def sign_rs256(private_key: RSAPrivateKey, data: bytes) -> bytes:
    return private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())


def b64url_encode(data: bytes) -> str:
    """Unpadded base64url, as used in JWT segments."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")
