"""Pytest configuration and fixtures for file summary tests.

This module provides common fixtures and configuration for all tests.
"""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from filesummary.config import (
    FILESUMMARY_BOND_BASE_URL,
    FILESUMMARY_COMPACT_ID_HOST,
    FILESUMMARY_ENV,
    FILESUMMARY_GCS_BASE_URL,
    FILESUMMARY_HTTP_TIMEOUT_SECONDS,
    FILESUMMARY_SAM_BASE_URL,
    FILESUMMARY_SIGNED_URL_TTL_SECONDS,
    ServiceConfig,
)
from filesummary.services.summary.models import ServiceAccountKey
from tests.fixtures.summary import make_service_account_key

TEST_SAM_BASE_URL = "https://sam.example.test"
TEST_BOND_BASE_URL = "https://bond.example.test"
TEST_GCS_BASE_URL = "https://gcs.example.test"

CONFIG_ENV_VARS = (
    FILESUMMARY_ENV,
    FILESUMMARY_SAM_BASE_URL,
    FILESUMMARY_BOND_BASE_URL,
    FILESUMMARY_GCS_BASE_URL,
    FILESUMMARY_COMPACT_ID_HOST,
    FILESUMMARY_HTTP_TIMEOUT_SECONDS,
    FILESUMMARY_SIGNED_URL_TTL_SECONDS,
)


@pytest.fixture(autouse=True)
def clear_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test from an environment with no service settings."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(scope="session")
def rsa_private_key() -> RSAPrivateKey:
    """One 2048-bit RSA key per session; generation is slow."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def service_account_key(rsa_private_key: RSAPrivateKey) -> ServiceAccountKey:
    return make_service_account_key(rsa_private_key)


@pytest.fixture
def service_config() -> ServiceConfig:
    """Configuration pointing every upstream at a test host."""
    return ServiceConfig(
        env="dev",
        sam_base_url=TEST_SAM_BASE_URL,
        bond_base_url=TEST_BOND_BASE_URL,
        gcs_base_url=TEST_GCS_BASE_URL,
        compact_id_host="dataguids.org",
        http_timeout_seconds=5.0,
        signed_url_ttl_seconds=3600,
    )
