"""Tests for the credential resolver's three exchange outcomes."""

from __future__ import annotations

import logging

import httpx
import pytest

from filesummary.services.summary.classifier import classify_uri
from filesummary.services.summary.errors import KeyExchangeError
from filesummary.services.summary.models import (
    Credential,
    KeyExchangeStatus,
    KeyProvider,
    ServiceAccountKey,
)
from filesummary.services.summary.resolver import CredentialResolver
from tests.fixtures.summary import FakeKeyProvider

CREDENTIAL = Credential(authorization="Bearer caller-token")
DOS_REFERENCE = classify_uri("dos://dg.4503/preview_dos.json")


def test_fake_satisfies_protocol() -> None:
    assert isinstance(FakeKeyProvider(), KeyProvider)


def test_obtained_key_is_returned(service_account_key: ServiceAccountKey) -> None:
    provider = FakeKeyProvider(key=service_account_key)
    result = CredentialResolver(provider).resolve(DOS_REFERENCE, CREDENTIAL)

    assert result.status == KeyExchangeStatus.OBTAINED
    assert result.key is service_account_key
    assert provider.calls == [(DOS_REFERENCE, CREDENTIAL)]


def test_not_linked_continues_without_key() -> None:
    result = CredentialResolver(FakeKeyProvider()).resolve(DOS_REFERENCE, CREDENTIAL)

    assert result.status == KeyExchangeStatus.NOT_LINKED
    assert result.key is None


def test_none_result_is_read_as_not_linked() -> None:
    provider = FakeKeyProvider(return_none=True)
    result = CredentialResolver(provider).resolve(DOS_REFERENCE, CREDENTIAL)

    assert result.status == KeyExchangeStatus.NOT_LINKED


def test_not_linked_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="filesummary.services.summary.resolver"):
        CredentialResolver(FakeKeyProvider()).resolve(DOS_REFERENCE, CREDENTIAL, request_id="r-1")

    assert any("No service account key" in r.getMessage() for r in caplog.records)
    assert any(getattr(r, "request_id", None) == "r-1" for r in caplog.records)


def test_key_exchange_error_propagates_unchanged() -> None:
    error = KeyExchangeError("bond is down", upstream_status=503, url="https://bond/key")
    provider = FakeKeyProvider(error=error)

    with pytest.raises(KeyExchangeError) as exc_info:
        CredentialResolver(provider).resolve(DOS_REFERENCE, CREDENTIAL)

    assert exc_info.value is error


def test_unexpected_exception_is_wrapped() -> None:
    provider = FakeKeyProvider(error=httpx.ConnectError("Connection refused"))

    with pytest.raises(KeyExchangeError) as exc_info:
        CredentialResolver(provider).resolve(DOS_REFERENCE, CREDENTIAL)

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
    assert exc_info.value.status_code == 502
    assert exc_info.value.to_details()["cause"] == "ConnectError"
