"""Tests for environment-driven service configuration."""

from __future__ import annotations

import logging

import pytest

from filesummary.config import (
    DEFAULT_COMPACT_ID_HOST,
    DEFAULT_GCS_BASE_URL,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_SIGNED_URL_TTL_SECONDS,
    MAX_SIGNED_URL_TTL_SECONDS,
    ConfigError,
    ServiceConfig,
)


class TestDefaults:
    def test_defaults_target_dev(self) -> None:
        config = ServiceConfig.from_env()

        assert config.env == "dev"
        assert config.sam_base_url == "https://sam.dsde-dev.broadinstitute.org"
        assert config.bond_base_url == "https://broad-bond-dev.appspot.com"
        assert config.gcs_base_url == DEFAULT_GCS_BASE_URL
        assert config.compact_id_host == DEFAULT_COMPACT_ID_HOST
        assert config.http_timeout_seconds == DEFAULT_HTTP_TIMEOUT_SECONDS
        assert config.signed_url_ttl_seconds == DEFAULT_SIGNED_URL_TTL_SECONDS

    def test_environment_selects_upstreams(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FILESUMMARY_ENV", "Prod")

        config = ServiceConfig.from_env()

        assert config.env == "prod"
        assert config.sam_base_url == "https://sam.dsde-prod.broadinstitute.org"
        assert config.bond_base_url == "https://broad-bond-prod.appspot.com"

    def test_unknown_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FILESUMMARY_ENV", "qa")

        with pytest.raises(ConfigError, match="qa"):
            ServiceConfig.from_env()


class TestOverrides:
    def test_base_urls_override_and_lose_trailing_slash(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FILESUMMARY_SAM_BASE_URL", "http://localhost:9001/")
        monkeypatch.setenv("FILESUMMARY_BOND_BASE_URL", "http://localhost:9002")
        monkeypatch.setenv("FILESUMMARY_GCS_BASE_URL", "http://localhost:9003//")
        monkeypatch.setenv("FILESUMMARY_COMPACT_ID_HOST", "ids.example.test")

        config = ServiceConfig.from_env()

        assert config.sam_base_url == "http://localhost:9001"
        assert config.bond_base_url == "http://localhost:9002"
        assert config.gcs_base_url == "http://localhost:9003"
        assert config.compact_id_host == "ids.example.test"

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FILESUMMARY_HTTP_TIMEOUT_SECONDS", "2.5")
        assert ServiceConfig.from_env().http_timeout_seconds == 2.5

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_bad_timeout_falls_back(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture, raw: str
    ) -> None:
        monkeypatch.setenv("FILESUMMARY_HTTP_TIMEOUT_SECONDS", raw)

        with caplog.at_level(logging.WARNING, logger="filesummary.config"):
            config = ServiceConfig.from_env()

        assert config.http_timeout_seconds == DEFAULT_HTTP_TIMEOUT_SECONDS
        assert "FILESUMMARY_HTTP_TIMEOUT_SECONDS" in caplog.text

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("900", 900),
            ("0", 1),
            ("-10", 1),
            (str(MAX_SIGNED_URL_TTL_SECONDS + 1), MAX_SIGNED_URL_TTL_SECONDS),
            ("not-a-number", DEFAULT_SIGNED_URL_TTL_SECONDS),
        ],
    )
    def test_signed_url_ttl(
        self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: int
    ) -> None:
        monkeypatch.setenv("FILESUMMARY_SIGNED_URL_TTL_SECONDS", raw)
        assert ServiceConfig.from_env().signed_url_ttl_seconds == expected
