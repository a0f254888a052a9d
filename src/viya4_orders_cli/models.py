"""Pydantic models shared across viya4_orders_cli.

**Request/response models** -- produced and consumed by the asset retriever:
    :class:`AssetKind`, :class:`AssetRequest`, :class:`AssetResult`.

**Auth models** -- the token endpoint's JSON payload:
    :class:`TokenResponse`.

**Configuration models** -- the resolved layered configuration:
    :class:`Settings`.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_API_HOST = "https://api.sas.com"
"""Scheme and host of the SAS Viya Orders API."""

REQUEST_TIMEOUT = None
"""httpx timeout for API calls. ``None`` waits for the response however long
it takes; generating deployment assets can take minutes."""


# --- Assets ---


class AssetKind(str, enum.Enum):
    """Downloadable order asset categories.

    The value of each member is the final URL path segment of the asset
    request, so it must stay verbatim (including its camel case).
    """

    LICENSE = "license"
    DEPLOYMENT_ASSETS = "deploymentAssets"
    CERTIFICATES = "certificates"
    ASSET_HISTORY = "assetHistory"

    @property
    def has_cadence(self) -> bool:
        """Whether results for this kind carry cadence information."""
        return self in (AssetKind.LICENSE, AssetKind.DEPLOYMENT_ASSETS)


class AssetRequest(BaseModel):
    """Parameters of a single order asset request.

    Constructed once per request and never mutated.

    Example::

        AssetRequest(
            token="eyJhbGciOi...",
            kind=AssetKind.LICENSE,
            order_number="9CV123",
            cadence_name="stable",
            cadence_version="2025.01",
        )
    """

    model_config = ConfigDict(frozen=True)

    token: str
    kind: AssetKind
    order_number: str
    cadence_name: str = ""
    cadence_version: str = ""
    cadence_release: str = Field(
        default="", description="Only meaningful for deploymentAssets"
    )
    file_path: str = Field(
        default="", description="Target directory; empty means the current directory"
    )
    file_name: str = Field(
        default="", description="Target file stem; empty means the server-supplied name"
    )
    output_format: str = "text"
    base_url: str = DEFAULT_API_HOST


class AssetResult(BaseModel):
    """Summary of a completed asset retrieval.

    Filled progressively while a retrieval runs and rendered once at the
    end. The aliases are the JSON keys used by ``--output json``.
    """

    model_config = ConfigDict(populate_by_name=True)

    order_number: str = Field(default="", alias="orderNumber")
    asset_name: str = Field(default="", alias="assetName")
    asset_req_url: str = Field(default="", alias="assetReqURL")
    asset_location: str = Field(default="", alias="assetLocation")
    cadence: str = Field(default="", alias="cadence")
    cadence_release: str = Field(default="", alias="cadenceRelease")

    def text_fields(self) -> list[tuple[str, str]]:
        """Return ``(label, value)`` pairs in display order for text output."""
        return [
            ("OrderNumber", self.order_number),
            ("AssetName", self.asset_name),
            ("AssetReqURL", self.asset_req_url),
            ("AssetLocation", self.asset_location),
            ("Cadence", self.cadence),
            ("CadenceRelease", self.cadence_release),
        ]


# --- Auth ---


class TokenResponse(BaseModel):
    """JSON body returned by the ``/mysas/token`` endpoint."""

    access_token: str
    token_type: Optional[str] = None
    issued_at: Optional[int] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None


# --- Configuration ---


class Settings(BaseModel):
    """Effective configuration after flag/environment/config-file resolution.

    Credentials are kept base64-encoded here; decoding happens in
    :func:`viya4_orders_cli.auth.get_bearer_token` so that a bad encoding
    surfaces as a :class:`~viya4_orders_cli.exceptions.ConfigError` at the
    moment the token is requested.
    """

    client_credentials_id: str = ""
    client_credentials_secret: str = ""
    file_path: str = ""
    file_name: str = ""
    output: str = "text"
    config_file: Optional[str] = Field(
        default=None, description="Config file that was read, if any"
    )
