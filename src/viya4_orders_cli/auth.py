"""OAuth2 Client Credentials token exchange.

This module provides :func:`get_bearer_token`, which performs the
non-interactive Client Credentials grant (:rfc:`6749` section 4.4) against
the SAS Viya Orders API token endpoint, exchanging the configured
``clientCredentialsId`` and ``clientCredentialsSecret`` for a bearer token.

The API grants tokens for roughly 30 minutes. One token is fetched per
process run; it is neither cached on disk nor refreshed.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from viya4_orders_cli.exceptions import AuthError, ConfigError
from viya4_orders_cli.models import DEFAULT_API_HOST, REQUEST_TIMEOUT, Settings, TokenResponse

logger = logging.getLogger(__name__)

TOKEN_PATH = "/mysas/token"
TOKEN_URL = DEFAULT_API_HOST + TOKEN_PATH


def decode_credential(value: str, name: str) -> str:
    """Decode a base64-encoded credential from the configuration.

    Args:
        value: The base64 text.
        name: Config key, used in error messages.

    Returns:
        The decoded credential.

    Raises:
        ConfigError: If the value is empty or is not valid base64 text.
    """
    if not value:
        raise ConfigError(f"{name} is not set")
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise ConfigError(f"attempt to decode {name} failed: {exc}") from exc


def describe_failure(response: httpx.Response) -> str:
    """Return the body text of a failed response, or ``"<code> -- <reason>"`` if it is empty."""
    text = response.text
    if text:
        return text
    return f"{response.status_code} -- {response.reason_phrase}"


def get_bearer_token(
    settings: Settings,
    *,
    client: Optional[httpx.Client] = None,
    token_url: str = TOKEN_URL,
) -> str:
    """Exchange client credentials for a bearer token.

    Sends ``grant_type=client_credentials`` along with the decoded
    ``client_id`` and ``client_secret`` as a form-encoded POST.

    Args:
        settings: Resolved settings holding the base64-encoded credentials.
        client: Optional HTTP client to send the request with. A
            short-lived client is created when omitted.
        token_url: Token endpoint URL.

    Returns:
        The ``access_token`` from the token response.

    Raises:
        ConfigError: If a credential is missing or not valid base64.
        AuthError: If the request fails to complete, the endpoint answers
            with a non-200 status, or the response is not a token.
    """
    data = {
        "client_id": decode_credential(settings.client_credentials_id, "clientCredentialsId"),
        "client_secret": decode_credential(
            settings.client_credentials_secret, "clientCredentialsSecret"
        ),
        "grant_type": "client_credentials",
    }

    logger.debug("Requesting bearer token from %s", token_url)
    try:
        if client is None:
            with httpx.Client(timeout=REQUEST_TIMEOUT) as own_client:
                response = own_client.post(token_url, data=data)
        else:
            response = client.post(token_url, data=data)
    except httpx.HTTPError as exc:
        raise AuthError(f"Bearer token request failed to complete: {exc}") from exc

    if response.status_code != 200:
        raise AuthError(f"Bearer token request failed: {describe_failure(response)}")

    try:
        token = TokenResponse.model_validate_json(response.content)
    except PydanticValidationError as exc:
        raise AuthError(f"unmarshalling of token API response failed: {exc}") from exc

    logger.debug("Bearer token received (expires_in=%s)", token.expires_in)
    return token.access_token
