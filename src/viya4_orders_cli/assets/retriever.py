"""Order asset retrieval.

:class:`AssetRetriever` performs one fetch-save-describe cycle for an
:class:`~viya4_orders_cli.models.AssetRequest`:

1. validate the order number (at construction),
2. build the request URL,
3. send the authenticated GET,
4. turn a non-200 response into a :class:`~viya4_orders_cli.exceptions.ServerError`,
5. derive the target file from ``Content-Disposition``,
6. stream the body to disk,
7. work out the cadence for license and deployment-assets downloads,
8. render the :class:`~viya4_orders_cli.models.AssetResult` to stdout.

The steps run strictly in order and the first failure aborts the rest. A
partially written file is left on disk. The result record is created per
retrieval and handed from step to step, so concurrent retrievals share
nothing but stdout.
"""

from __future__ import annotations

import json
import logging
from email.headerregistry import HeaderRegistry
from email.message import Message
from pathlib import Path
from typing import Optional

import httpx

from viya4_orders_cli.assets.cadence import deployment_cadence, license_cadence
from viya4_orders_cli.assets.validation import validate_order_number
from viya4_orders_cli.auth import describe_failure
from viya4_orders_cli.exceptions import (
    FormatError,
    IOError_,
    NotFoundError,
    RequestError,
    ServerError,
)
from viya4_orders_cli.models import REQUEST_TIMEOUT, AssetKind, AssetRequest, AssetResult
from viya4_orders_cli.output import OutputFormat, get_output, resolve_format

logger = logging.getLogger(__name__)

ORDERS_BASE_PATH = "/mysas/orders"

_HEADERS = HeaderRegistry()


def build_url(request: AssetRequest) -> str:
    """Build the Orders API URL for *request*.

    Cadence name and version are lower-cased; each optional segment is only
    added when its value is non-empty. A cadence release only applies to
    deployment assets and is ignored for the other kinds.

    Example::

        >>> build_url(AssetRequest(token="t", kind=AssetKind.CERTIFICATES, order_number="993456"))
        'https://api.sas.com/mysas/orders/993456/certificates'
    """
    parts = [request.base_url.rstrip("/") + ORDERS_BASE_PATH, request.order_number]
    if request.cadence_name:
        parts += ["cadenceNames", request.cadence_name.lower()]
    if request.cadence_version:
        parts += ["cadenceVersions", request.cadence_version.lower()]
    if request.cadence_release and request.kind == AssetKind.DEPLOYMENT_ASSETS:
        parts += ["cadenceReleases", request.cadence_release]
    parts.append(request.kind.value)
    return "/".join(parts)


def _repeated_params(content_disposition: str) -> list[str]:
    """Return parameter names that occur more than once, lower-cased."""
    # The header registry keeps one value per name without flagging repeats.
    msg = Message()
    msg["Content-Disposition"] = content_disposition
    params = msg.get_params(failobj=[], header="content-disposition")[1:]
    names = [name.lower() for name, _ in params]
    return sorted({name for name in names if names.count(name) > 1})


def server_filename(content_disposition: Optional[str]) -> str:
    """Return the ``filename`` parameter of a ``Content-Disposition`` header.

    The header is parsed strictly: any RFC 2183 syntax defect, a missing
    disposition type, or a repeated parameter is rejected. Only the final
    path component is returned, so a server-supplied name can never point
    outside the target directory.

    Raises:
        FormatError: If the header is missing, malformed, or has no
            ``filename`` parameter.
    """
    if not content_disposition:
        raise FormatError("asset response has no Content-Disposition header")

    def _malformed(reason: object) -> FormatError:
        return FormatError(
            f"cannot parse Content-Disposition header '{content_disposition}': {reason}"
        )

    header = _HEADERS("Content-Disposition", content_disposition)
    if header.defects:
        raise _malformed(header.defects[0])
    if not header.content_disposition:
        raise _malformed("no disposition type")
    repeated = _repeated_params(content_disposition)
    if repeated:
        raise _malformed(f"duplicate parameter '{repeated[0]}'")

    filename = header.params.get("filename")
    if not filename:
        raise _malformed("no filename parameter")

    name = Path(filename.replace("\\", "/")).name
    if not name:
        raise _malformed("empty filename")
    return name


def target_path(request: AssetRequest, content_disposition: Optional[str]) -> Path:
    """Return where the asset is saved.

    The directory is ``request.file_path`` or the current working directory.
    With an explicit ``request.file_name`` the server's extension is kept,
    e.g. ``myfile`` + ``license.txt`` gives ``myfile.txt``.

    Raises:
        FormatError: If the server filename cannot be determined.
        IOError_: If the current working directory cannot be determined.
    """
    if request.file_path:
        directory = Path(request.file_path)
    else:
        try:
            directory = Path.cwd()
        except OSError as exc:
            raise IOError_(f"cannot determine the current working directory: {exc}") from exc

    api_name = server_filename(content_disposition)
    if request.file_name:
        return directory / (request.file_name + Path(api_name).suffix)
    return directory / api_name


def format_result(result: AssetResult, output_format: str) -> str:
    """Render *result* as ``--output`` asks.

    JSON output is a single tab-indented object keyed by the JSON aliases;
    text output is one ``Label: value`` line per field in fixed order.
    """
    if resolve_format(output_format) == OutputFormat.JSON:
        return json.dumps(result.model_dump(by_alias=True), indent="\t", ensure_ascii=False)
    return "\n".join(f"{label}: {value}" for label, value in result.text_fields())


class AssetRetriever:
    """Downloads one order asset and describes it.

    Args:
        request: What to download and where to put it.
        client: Optional HTTP client. A client is created (and closed) per
            retrieval when omitted; pass one to share a connection pool or
            to inject a test transport.

    Raises:
        ValidationError: If ``request.order_number`` is malformed.

    Example::

        request = AssetRequest(token=token, kind=AssetKind.CERTIFICATES, order_number="9CV123")
        result = AssetRetriever(request).get_asset()
    """

    def __init__(self, request: AssetRequest, client: Optional[httpx.Client] = None) -> None:
        validate_order_number(request.order_number)
        self._request = request
        self._client = client

    @property
    def request(self) -> AssetRequest:
        return self._request

    def get_asset(self) -> AssetResult:
        """Fetch the asset, print its summary to stdout and return the result."""
        result = self.fetch()
        get_output().print_data(format_result(result, self._request.output_format))
        return result

    def fetch(self) -> AssetResult:
        """Download and save the asset without printing anything to stdout.

        Returns:
            The populated :class:`~viya4_orders_cli.models.AssetResult`.

        Raises:
            RequestError: If the request cannot be completed.
            ServerError: If the API answers with a non-200 status
                (:class:`~viya4_orders_cli.exceptions.NotFoundError` for 404).
            FormatError: If the response or the downloaded archive cannot
                be parsed.
            IOError_: If the asset cannot be written to disk.
        """
        req = self._request
        result = AssetResult(order_number=req.order_number, asset_name=req.kind.value)
        result.asset_req_url = build_url(req)

        location = self._download(result.asset_req_url)
        result.asset_location = str(location)

        if req.kind == AssetKind.LICENSE:
            result.cadence, result.cadence_release = license_cadence(
                req.cadence_name, req.cadence_version
            )
        elif req.kind == AssetKind.DEPLOYMENT_ASSETS:
            result.cadence, result.cadence_release = deployment_cadence(location)
        return result

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _download(self, url: str) -> Path:
        """GET *url* and stream the body to the derived target file."""
        headers = {"Authorization": f"Bearer {self._request.token}"}
        logger.debug("GET %s", url)
        try:
            if self._client is None:
                with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
                    return self._send(client, url, headers)
            return self._send(self._client, url, headers)
        except httpx.HTTPError as exc:
            raise RequestError(f"asset request failed to complete: {exc}") from exc

    def _send(self, client: httpx.Client, url: str, headers: dict[str, str]) -> Path:
        with client.stream("GET", url, headers=headers) as response:
            if response.status_code != 200:
                response.read()
                message = f"asset request failed: {describe_failure(response)}"
                if response.status_code == 404:
                    raise NotFoundError(message)
                raise ServerError(message)

            location = target_path(self._request, response.headers.get("Content-Disposition"))
            try:
                out = open(location, "wb")
            except OSError as exc:
                raise IOError_(f"attempt to create output file {location} failed: {exc}") from exc
            with out:
                for chunk in response.iter_bytes():
                    try:
                        out.write(chunk)
                    except OSError as exc:
                        raise IOError_(f"attempt to write to {location} failed: {exc}") from exc
            logger.debug("Saved %s to %s", self._request.kind.value, location)
            return location
