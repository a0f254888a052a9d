"""Tests for the client-credentials bearer token exchange."""

from __future__ import annotations

import base64
from unittest.mock import patch
from urllib.parse import parse_qs

import httpx
import pytest

from viya4_orders_cli.auth import (
    TOKEN_URL,
    decode_credential,
    describe_failure,
    get_bearer_token,
)
from viya4_orders_cli.exceptions import AuthError, ConfigError
from viya4_orders_cli.models import Settings


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def _settings(**kwargs: str) -> Settings:
    defaults = {
        "client_credentials_id": _b64("client-id"),
        "client_credentials_secret": _b64("s3cr3t"),
    }
    defaults.update(kwargs)
    return Settings(**defaults)


def _token_client(response: httpx.Response, seen: list[httpx.Request] | None = None) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return response

    return httpx.Client(transport=httpx.MockTransport(handler))


_TOKEN_JSON = {
    "access_token": "abc.def.ghi",
    "token_type": "BearerToken",
    "issued_at": 1736960000000,
    "expires_in": 1799,
    "scope": "",
}


# ---------------------------------------------------------------------------
# decode_credential
# ---------------------------------------------------------------------------


class TestDecodeCredential:
    def test_decodes_base64(self) -> None:
        assert decode_credential(_b64("client-id"), "clientCredentialsId") == "client-id"

    def test_empty_value(self) -> None:
        with pytest.raises(ConfigError, match="clientCredentialsId is not set"):
            decode_credential("", "clientCredentialsId")

    def test_invalid_base64(self) -> None:
        with pytest.raises(ConfigError, match="attempt to decode clientCredentialsSecret failed"):
            decode_credential("not base64!", "clientCredentialsSecret")

    def test_not_utf8(self) -> None:
        raw = base64.b64encode(b"\xff\xfe\xfd").decode()
        with pytest.raises(ConfigError):
            decode_credential(raw, "clientCredentialsId")


# ---------------------------------------------------------------------------
# describe_failure
# ---------------------------------------------------------------------------


class TestDescribeFailure:
    def test_body_text(self) -> None:
        assert describe_failure(httpx.Response(401, text="invalid_client")) == "invalid_client"

    def test_empty_body(self) -> None:
        assert describe_failure(httpx.Response(401)) == "401 -- Unauthorized"


# ---------------------------------------------------------------------------
# get_bearer_token
# ---------------------------------------------------------------------------


class TestGetBearerToken:
    def test_success(self) -> None:
        seen: list[httpx.Request] = []
        with _token_client(httpx.Response(200, json=_TOKEN_JSON), seen) as client:
            token = get_bearer_token(_settings(), client=client)

        assert token == "abc.def.ghi"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == TOKEN_URL
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert parse_qs(request.content.decode()) == {
            "client_id": ["client-id"],
            "client_secret": ["s3cr3t"],
            "grant_type": ["client_credentials"],
        }

    def test_custom_token_url(self) -> None:
        seen: list[httpx.Request] = []
        with _token_client(httpx.Response(200, json=_TOKEN_JSON), seen) as client:
            get_bearer_token(
                _settings(), client=client, token_url="http://localhost:9000/mysas/token"
            )
        assert str(seen[0].url) == "http://localhost:9000/mysas/token"

    def test_minimal_token_payload(self) -> None:
        with _token_client(httpx.Response(200, json={"access_token": "only"})) as client:
            assert get_bearer_token(_settings(), client=client) == "only"

    def test_default_client_has_no_timeout(self) -> None:
        timeouts: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            timeouts.append(request.extensions["timeout"])
            return httpx.Response(200, json=_TOKEN_JSON)

        transport = httpx.MockTransport(handler)
        real_client = httpx.Client
        with patch(
            "viya4_orders_cli.auth.httpx.Client",
            side_effect=lambda **kwargs: real_client(transport=transport, **kwargs),
        ):
            assert get_bearer_token(_settings()) == "abc.def.ghi"
        assert timeouts == [{"connect": None, "read": None, "write": None, "pool": None}]

    def test_missing_credentials_sends_nothing(self) -> None:
        seen: list[httpx.Request] = []
        with _token_client(httpx.Response(200, json=_TOKEN_JSON), seen) as client:
            with pytest.raises(ConfigError, match="clientCredentialsSecret is not set"):
                get_bearer_token(_settings(client_credentials_secret=""), client=client)
        assert seen == []

    def test_rejected_with_body(self) -> None:
        with _token_client(httpx.Response(401, text="invalid_client")) as client:
            with pytest.raises(AuthError) as exc_info:
                get_bearer_token(_settings(), client=client)
        assert str(exc_info.value) == "Bearer token request failed: invalid_client"
        assert exc_info.value.exit_code == 3

    def test_rejected_with_empty_body(self) -> None:
        with _token_client(httpx.Response(503)) as client:
            with pytest.raises(AuthError, match="503 -- Service Unavailable"):
                get_bearer_token(_settings(), client=client)

    def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(AuthError, match="failed to complete: timed out"):
                get_bearer_token(_settings(), client=client)

    def test_malformed_json(self) -> None:
        with _token_client(httpx.Response(200, text="<html>")) as client:
            with pytest.raises(AuthError, match="unmarshalling of token API response failed"):
                get_bearer_token(_settings(), client=client)

    def test_missing_access_token(self) -> None:
        with _token_client(httpx.Response(200, json={"token_type": "BearerToken"})) as client:
            with pytest.raises(AuthError, match="unmarshalling"):
                get_bearer_token(_settings(), client=client)
