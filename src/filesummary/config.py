"""File summary service configuration.

All settings come from environment variables. Upstream base URLs default to
the deployment environment named by FILESUMMARY_ENV.

Environment Variables:
    FILESUMMARY_ENV: Deployment environment (dev, staging, alpha, perf, prod).
        Default: "dev".
    FILESUMMARY_SAM_BASE_URL: Identity service base URL
        (default: https://sam.dsde-{env}.broadinstitute.org).
    FILESUMMARY_BOND_BASE_URL: Account link service base URL
        (default: https://broad-bond-{env}.appspot.com).
    FILESUMMARY_GCS_BASE_URL: Cloud Storage JSON API base URL
        (default: https://www.googleapis.com).
    FILESUMMARY_COMPACT_ID_HOST: Resolver host for compact identifiers such as
        dg.4503 (default: dataguids.org).
    FILESUMMARY_HTTP_TIMEOUT_SECONDS: Per-call upstream timeout (default: 30).
    FILESUMMARY_SIGNED_URL_TTL_SECONDS: Signed URL lifetime, clamped to
        1..604800 (default: 3600).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Final

logger = logging.getLogger(__name__)

FILESUMMARY_ENV: Final = "FILESUMMARY_ENV"
FILESUMMARY_SAM_BASE_URL: Final = "FILESUMMARY_SAM_BASE_URL"
FILESUMMARY_BOND_BASE_URL: Final = "FILESUMMARY_BOND_BASE_URL"
FILESUMMARY_GCS_BASE_URL: Final = "FILESUMMARY_GCS_BASE_URL"
FILESUMMARY_COMPACT_ID_HOST: Final = "FILESUMMARY_COMPACT_ID_HOST"
FILESUMMARY_HTTP_TIMEOUT_SECONDS: Final = "FILESUMMARY_HTTP_TIMEOUT_SECONDS"
FILESUMMARY_SIGNED_URL_TTL_SECONDS: Final = "FILESUMMARY_SIGNED_URL_TTL_SECONDS"

VALID_ENVIRONMENTS: Final = frozenset({"dev", "staging", "alpha", "perf", "prod"})
DEFAULT_ENVIRONMENT: Final = "dev"
DEFAULT_GCS_BASE_URL: Final = "https://www.googleapis.com"
DEFAULT_COMPACT_ID_HOST: Final = "dataguids.org"
DEFAULT_HTTP_TIMEOUT_SECONDS: Final = 30.0
DEFAULT_SIGNED_URL_TTL_SECONDS: Final = 3600
MAX_SIGNED_URL_TTL_SECONDS: Final = 7 * 24 * 60 * 60


class ConfigError(Exception):
    """Raised when the environment names an unknown deployment."""


def _get_env_str(key: str, default: str = "") -> str:
    """Get a stripped string from the environment."""
    return os.environ.get(key, default).strip() or default


def _get_env_float(key: str, default: float) -> float:
    """Get a positive float from the environment, falling back on bad values."""
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Non-positive %s=%r; using default %s", key, raw, default)
        return default
    return value


def _get_env_int(key: str, default: int) -> int:
    """Get an int from the environment, falling back on bad values."""
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using default %s", key, raw, default)
        return default


def default_sam_base_url(env: str) -> str:
    return f"https://sam.dsde-{env}.broadinstitute.org"


def default_bond_base_url(env: str) -> str:
    return f"https://broad-bond-{env}.appspot.com"


@dataclass(frozen=True)
class ServiceConfig:
    """Resolved service configuration.

    Attributes:
        env: Deployment environment name.
        sam_base_url: Identity service issuing pet service account keys.
        bond_base_url: Account link service issuing linked service account keys.
        gcs_base_url: Cloud Storage JSON API base URL.
        compact_id_host: Resolver host for compact identifier authorities.
        http_timeout_seconds: Timeout applied to each upstream call.
        signed_url_ttl_seconds: Lifetime of generated signed URLs.
    """

    env: str = DEFAULT_ENVIRONMENT
    sam_base_url: str = default_sam_base_url(DEFAULT_ENVIRONMENT)
    bond_base_url: str = default_bond_base_url(DEFAULT_ENVIRONMENT)
    gcs_base_url: str = DEFAULT_GCS_BASE_URL
    compact_id_host: str = DEFAULT_COMPACT_ID_HOST
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    signed_url_ttl_seconds: int = DEFAULT_SIGNED_URL_TTL_SECONDS

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Build configuration from environment variables.

        Raises:
            ConfigError: If FILESUMMARY_ENV is not a known environment.
        """
        env = _get_env_str(FILESUMMARY_ENV, DEFAULT_ENVIRONMENT).lower()
        if env not in VALID_ENVIRONMENTS:
            raise ConfigError(
                f"Unknown {FILESUMMARY_ENV}={env!r}; expected one of {sorted(VALID_ENVIRONMENTS)}"
            )

        ttl = _get_env_int(FILESUMMARY_SIGNED_URL_TTL_SECONDS, DEFAULT_SIGNED_URL_TTL_SECONDS)
        clamped_ttl = min(max(ttl, 1), MAX_SIGNED_URL_TTL_SECONDS)
        if clamped_ttl != ttl:
            logger.warning(
                "%s=%s out of range; clamped to %s",
                FILESUMMARY_SIGNED_URL_TTL_SECONDS,
                ttl,
                clamped_ttl,
            )

        return cls(
            env=env,
            sam_base_url=_get_env_str(FILESUMMARY_SAM_BASE_URL, default_sam_base_url(env)).rstrip(
                "/"
            ),
            bond_base_url=_get_env_str(
                FILESUMMARY_BOND_BASE_URL, default_bond_base_url(env)
            ).rstrip("/"),
            gcs_base_url=_get_env_str(FILESUMMARY_GCS_BASE_URL, DEFAULT_GCS_BASE_URL).rstrip("/"),
            compact_id_host=_get_env_str(FILESUMMARY_COMPACT_ID_HOST, DEFAULT_COMPACT_ID_HOST),
            http_timeout_seconds=_get_env_float(
                FILESUMMARY_HTTP_TIMEOUT_SECONDS, DEFAULT_HTTP_TIMEOUT_SECONDS
            ),
            signed_url_ttl_seconds=clamped_ttl,
        )
